# structs.py
#
# Licensed under GPL Version 3 or later
#

import datetime

from construct import Array, Int16ub, Int32ub, Int64ub, Struct
"""
http://developer.apple.com/library/mac/#technotes/tn/tn1150.html
"""

kHFSPlusSignature = b"H+"
kHFSXSignature    = b"HX"

kHFSExtentsFileID           = 3
kHFSCatalogFileID           = 4
kHFSAllocationFileID        = 6
kHFSStartupFileID           = 7
kHFSAttributesFileID        = 8

kHFSVolumeJournaledBit = 13

kHFSPlusExtentDensity = 8

HFSPlusExtentDescriptor = Struct(
    "startBlock" / Int32ub,
    "blockCount" / Int32ub,
)
HFSPlusExtentRecord = Array(kHFSPlusExtentDensity, HFSPlusExtentDescriptor)

HFSPlusForkData = Struct(
    "logicalSize" / Int64ub,
    "clumpSize" / Int32ub,
    "totalBlocks" / Int32ub,
    "extents" / HFSPlusExtentRecord,
)

HFSPlusVolumeHeader = Struct(
    "signature" / Int16ub,
    "version" / Int16ub,
    "attributes" / Int32ub,
    "lastMountedVersion" / Int32ub,
    "journalInfoBlock" / Int32ub,
    "createDate" / Int32ub,
    "modifyDate" / Int32ub,
    "backupDate" / Int32ub,
    "checkedDate" / Int32ub,
    "fileCount" / Int32ub,
    "folderCount" / Int32ub,
    "blockSize" / Int32ub,
    "totalBlocks" / Int32ub,
    "freeBlocks" / Int32ub,
    "nextAllocation" / Int32ub,
    "rsrcClumpSize" / Int32ub,
    "dataClumpSize" / Int32ub,
    "nextCatalogID" / Int32ub,
    "writeCount" / Int32ub,
    "encodingsBitmap" / Int64ub,

    "finderInfo" / Array(8, Int32ub),

    "allocationFile" / HFSPlusForkData,
    "extentsFile" / HFSPlusForkData,
    "catalogFile" / HFSPlusForkData,
    "attributesFile" / HFSPlusForkData,
    "startupFile" / HFSPlusForkData,
)


def offsetof(struct, name):
    """Byte offset of the field `name` inside a fixed-size construct Struct."""
    offset = 0
    for subcon in struct.subcons:
        if subcon.name == name:
            return offset
        offset += subcon.sizeof()
    raise KeyError(name)


OFFSET_VOLUME_HEADER = 1024

SIZE_EXTENT_DESCRIPTOR = HFSPlusExtentDescriptor.sizeof()              # 8
SIZE_FORK_DATA = HFSPlusForkData.sizeof()                              # 80

OFFSET_FORK_DATA_EXTENT_RECORD = offsetof(HFSPlusForkData, "extents")  # 16
OFFSET_VOLUME_HEADER_FORKS = offsetof(HFSPlusVolumeHeader, "allocationFile")  # 112

# special file name -> reserved catalog node ID, in volume header order
SPECIAL_FILES = (
    ("allocationFile", kHFSAllocationFileID),
    ("extentsFile", kHFSExtentsFileID),
    ("catalogFile", kHFSCatalogFileID),
    ("attributesFile", kHFSAttributesFileID),
    ("startupFile", kHFSStartupFileID),
)

HFS_EPOCH = datetime.datetime(1904, 1, 1)


def hfs_date(t, local=False):
    """Seconds since 1904-01-01 00:00:00 as an aware datetime.

    HFS+ stores most dates in GMT; the volume header's createDate is the
    exception and is kept in local time, which `local` selects.
    """
    delta = datetime.timedelta(seconds=t)
    if local:
        return (HFS_EPOCH + delta).astimezone()
    return HFS_EPOCH.replace(tzinfo=datetime.timezone.utc) + delta
