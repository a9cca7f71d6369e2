# file.py
#
# Licensed under GPL Version 3 or later
#

import io
import bisect
import logging

from .errors import (ExtentOverflowNotSupportedError, InvalidVolumeHeaderError,
                     SeekOutOfRangeError, ShortReadError)

log = logging.getLogger(__name__)


class HFSFile(io.RawIOBase):
    """Seekable reader over the logical content of a fork.

    The fork's extents are mapped once, at construction, to a table of
    (logical start byte, physical start block) pairs. Only the eight extents
    stored in the fork record are used.
    """

    def __init__(self, volume, hfsplusfork, fileID=None):
        super(HFSFile, self).__init__()
        self.volume = volume
        self.fileID = fileID
        self.logicalSize = hfsplusfork.logicalSize
        self.blockSize = volume.blockSize
        if self.blockSize == 0 and self.logicalSize:
            raise InvalidVolumeHeaderError("volume block size is zero")

        self.offsets = tuple(self.mapExtents(hfsplusfork))
        self.starts = [start for start, _ in self.offsets]
        self.offset = 0

    def mapExtents(self, hfsplusfork):
        offsets = []
        seenBlocks = 0
        for i in range(hfsplusfork.numExtentDescriptors):
            seenBytes = seenBlocks * self.blockSize
            if seenBytes >= self.logicalSize:
                break
            extent = hfsplusfork.getExtentDescriptor(i)
            blockCount = extent.blockCount
            if blockCount == 0:
                log.debug("fork %r: empty extent in slot %d", self.fileID, i)
                continue
            offsets.append((seenBytes, extent.startBlock))
            seenBlocks += blockCount

        if seenBlocks * self.blockSize < self.logicalSize:
            # TODO: look the rest up in the extents overflow file
            raise ExtentOverflowNotSupportedError(
                "fork %r: %d bytes mapped by the extent record, logical size is %d" % (
                    self.fileID, seenBlocks * self.blockSize, self.logicalSize))

        log.debug("fork %r: %d bytes in %d extents", self.fileID,
                  self.logicalSize, len(offsets))
        return offsets

    def __repr__(self):
        return "<HFSFile fileID=%r size=%d extents=%d>" % (
            self.fileID, self.logicalSize, len(self.offsets))

    def size(self):
        return self.logicalSize

    def readable(self):
        return True

    def seekable(self):
        return True

    def tell(self):
        return self.offset

    def readinto(self, b):
        self._checkClosed()
        if self.offset > self.logicalSize:
            raise SeekOutOfRangeError("cannot read beyond end of file (offset %d, size %d)" % (
                self.offset, self.logicalSize))
        view = memoryview(b).cast("B")
        readSize = min(len(view), self.logicalSize - self.offset)
        if readSize == 0:
            return 0

        i = bisect.bisect_right(self.starts, self.offset) - 1
        extentStart, startBlock = self.offsets[i]
        # don't run past the end of this extent's physical run
        if i + 1 < len(self.offsets):
            readSize = min(readSize, self.offsets[i + 1][0] - self.offset)

        fsOffset = startBlock * self.blockSize + (self.offset - extentStart)
        data = self.volume.read(fsOffset, readSize)
        if not data:
            raise ShortReadError(fsOffset, readSize, 0)

        n = len(data)
        view[:n] = data
        self.offset += n
        return n

    def seek(self, offset, whence=io.SEEK_SET):
        self._checkClosed()
        if whence == io.SEEK_SET:
            if offset < 0:
                raise SeekOutOfRangeError("negative seek position %d" % offset)
            self.offset = offset
        elif whence == io.SEEK_END:
            if -offset > self.logicalSize:
                raise SeekOutOfRangeError("cannot seek before start of file")
            self.offset = self.logicalSize + offset
        elif whence == io.SEEK_CUR:
            if -offset > self.offset:
                raise SeekOutOfRangeError("cannot seek before start of file")
            self.offset += offset
        else:
            raise ValueError("invalid whence (%r)" % whence)
        return self.offset

    def readAll(self, output, chunkSize=io.DEFAULT_BUFFER_SIZE):
        """Copy the whole fork to `output`, returns the number of bytes written."""
        self.seek(0)
        total = 0
        while True:
            data = self.read(chunkSize)
            if not data:
                break
            output.write(data)
            total += len(data)
        return total
