# options.py
#
# Licensed under GPL Version 3 or later
#

from .structs import OFFSET_VOLUME_HEADER


class Options(object):
    def __init__(self, **kwargs):
        # byte offset of the volume header within the (sliced) device
        self.volumeHeaderOffset = OFFSET_VOLUME_HEADER
        # partition window inside a raw disk image
        self.partitionOffset = 0
        self.partitionLength = None
        # also accept HFSX ("HX") volumes
        self.acceptHFSX = False

        for name, value in kwargs.items():
            if not hasattr(self, name):
                raise TypeError("unknown option %r" % name)
            setattr(self, name, value)

    def wantsSlice(self):
        return self.partitionOffset != 0 or self.partitionLength is not None
