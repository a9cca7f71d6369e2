# slice.py
#
# Licensed under GPL Version 3 or later
#

import os

from .errors import InvalidFileViewError


class FileSlice(object):
    """A window [offset, offset+length) of a seekable stream.

    Used to present a partition inside a raw disk image as if it were the
    whole device. Reads go straight to the inner stream, whose cursor is
    shared; they are clamped to the end of the window.
    """

    def __init__(self, f, offset, length=None):
        fileLength = f.seek(0, os.SEEK_END)
        if offset < 0 or fileLength < offset:
            raise InvalidFileViewError(
                "partition offset %d outside of device (%d bytes)" % (offset, fileLength))
        if length is None:
            length = fileLength - offset
        elif length < 0 or fileLength < offset + length:
            raise InvalidFileViewError(
                "partition [%d, %d) outside of device (%d bytes)" % (
                    offset, offset + length, fileLength))

        self.f = f
        self.offset = offset
        self.length = length
        self.f.seek(offset)

    def size(self):
        return self.length

    def tell(self):
        return self.f.tell() - self.offset

    def read(self, n=-1):
        remaining = max(0, self.offset + self.length - self.f.tell())
        if n is None or n < 0:
            n = remaining
        return self.f.read(min(n, remaining))

    def seek(self, pos, whence=os.SEEK_SET):
        if whence == os.SEEK_SET:
            r = self.f.seek(self.offset + pos, os.SEEK_SET)
        elif whence == os.SEEK_CUR:
            r = self.f.seek(pos, os.SEEK_CUR)
        elif whence == os.SEEK_END:
            r = self.f.seek(self.offset + self.length + pos, os.SEEK_SET)
        else:
            raise ValueError("invalid whence (%r)" % whence)
        return r - self.offset

    def close(self):
        self.f.close()
