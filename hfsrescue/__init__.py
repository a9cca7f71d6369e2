# __init__.py
#
# Licensed under GPL Version 3 or later
#

from .errors import (HFSPlusError, ShortReadError, InvalidVolumeHeaderError,
                     InvalidFileViewError, ExtentOverflowNotSupportedError,
                     SeekOutOfRangeError)
from .file import HFSFile
from .options import Options
from .slice import FileSlice
from .structs import hfs_date
from .volume import (HFSVolume, VolumeHeader, ForkData, ExtentDescriptor,
                     Structure, openImage)
