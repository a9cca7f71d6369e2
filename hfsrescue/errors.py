# errors.py
#
# Licensed under GPL Version 3 or later
#


class HFSPlusError(Exception):
    pass


class ShortReadError(HFSPlusError, IOError):
    """The device returned fewer bytes than a structure needs."""

    def __init__(self, offset, expected, got):
        HFSPlusError.__init__(self,
            "short read at 0x%x: wanted %d bytes, got %d" % (offset, expected, got))
        self.offset = offset
        self.expected = expected
        self.got = got


class InvalidVolumeHeaderError(HFSPlusError):
    pass


class InvalidFileViewError(HFSPlusError, ValueError):
    """Invalid partition offset or length."""


class ExtentOverflowNotSupportedError(HFSPlusError):
    """The fork needs records from the extents overflow file."""


class SeekOutOfRangeError(HFSPlusError, ValueError):
    pass
