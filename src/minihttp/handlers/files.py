"""
=============================================================================
FILE RESPONDER
=============================================================================

Serves /file/{name} from one directory on disk.

=============================================================================
FLOW
=============================================================================

    GET /file/notes.txt
         │
         ▼
    1. name empty?                        → 400 No filename specified
         │
         ▼
    2. resolve root / name, still inside root?
                                          no → 404 (traversal attempt)
         │
         ▼
    3. open(path, "rb")                   fails → 404 File Not Found
         │
         ▼
    4. os.fstat(fd).st_size               fails → 500 Could not stat file
         │
         ▼
    5. bytearray(size)                    fails → 500 Memory error
         │
         ▼
    6. readinto() until size bytes        error or EOF early
         │                                       → 500 Could not read file
         ▼
    200, Content-Type from the MIME table, body = exactly size bytes

The file is stat'ed through the open descriptor, not by name, so the size
always belongs to the file we are actually reading. A file that shrinks
between fstat and read is a 500, never a truncated 200.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /file/../../etc/passwd

    root      = /srv/files
    resolved  = /etc/passwd       ← not under /srv/files → 404

resolve() also follows symlinks, so a link pointing out of the root is
refused the same way. We answer 404 rather than 403: from the client's
point of view there is simply no such file here.

=============================================================================
"""

import logging
import os
from pathlib import Path

from ..errors import RouteHandlerError
from ..http.mime_types import get_mime_type
from ..http.request import WIRE_ENCODING
from ..http.response import HTTPResponse, bad_request, file_response, html
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


NO_FILENAME = "<html>No filename specified</html>"
FILE_NOT_FOUND = "<html> File Not Found </html>"
STAT_FAILED = "<html>Could not stat file</html>"
MEMORY_ERROR = "<html>Memory error</html>"
READ_FAILED = "<html>Could not read file</html>"


class FileResponder:
    """
    Builds responses for files under a fixed root directory.

    Usage:
        files = FileResponder("/srv/files")
        response = files.serve("notes.txt")
    """

    def __init__(self, root: str | Path = "."):
        self.root = Path(root).resolve()

        if not self.root.is_dir():
            # Not fatal: every /file/ request will simply 404
            logger.warning(f"Served directory does not exist: {self.root}")

    def serve(self, name: str) -> HTTPResponse:
        """
        Respond with the contents of `name`.

        Args:
            name: The path remainder after "/file/", as wire text.
        """
        if not name:
            return bad_request(NO_FILENAME)

        try:
            path = self.resolve(name)
            content = self._read(path)
        except RouteHandlerError as e:
            logger.debug(f"File {name!r}: {e}")
            return html(e.body, HTTPStatus(e.status_code))

        # Type comes from the requested name, not a symlink target
        return file_response(content, get_mime_type(name))

    def resolve(self, name: str) -> Path:
        """
        Map a request name to a path inside the root.

        The name arrived decoded as ISO-8859-1; encoding it back gives the
        exact bytes the client sent, which os.fsdecode turns into a path.

        Raises:
            RouteHandlerError: 404 if the result escapes the root or is
                not a valid path at all.
        """
        relative = os.fsdecode(name.encode(WIRE_ENCODING))

        try:
            full_path = (self.root / relative).resolve()
        except (OSError, ValueError) as e:
            raise RouteHandlerError(f"Unresolvable path: {e}", 404, FILE_NOT_FOUND) from e

        try:
            full_path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {name!r}")
            raise RouteHandlerError("Outside served directory", 404, FILE_NOT_FOUND)

        return full_path

    def _read(self, path: Path) -> bytes:
        try:
            f = open(path, "rb")
        except (OSError, ValueError) as e:
            raise RouteHandlerError(f"Open failed: {e}", 404, FILE_NOT_FOUND) from e

        with f:
            try:
                size = os.fstat(f.fileno()).st_size
            except OSError as e:
                raise RouteHandlerError(f"fstat failed: {e}", 500, STAT_FAILED) from e

            try:
                buffer = bytearray(size)
            except MemoryError as e:
                raise RouteHandlerError(f"Cannot allocate {size} bytes", 500, MEMORY_ERROR) from e

            view = memoryview(buffer)
            total = 0
            try:
                while total < size:
                    n = f.readinto(view[total:])
                    if not n:
                        break  # EOF before size bytes: file shrank
                    total += n
            except OSError as e:
                raise RouteHandlerError(f"Read failed: {e}", 500, READ_FAILED) from e

            if total != size:
                raise RouteHandlerError(
                    f"Short read: {total} of {size} bytes", 500, READ_FAILED
                )

        return bytes(buffer)
