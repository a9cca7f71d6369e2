# volume.py
#
# Licensed under GPL Version 3 or later
#

import logging
import threading

from construct import Int16ub, Int32ub, Int64ub

from .errors import InvalidVolumeHeaderError, ShortReadError
from .file import HFSFile
from .options import Options
from .slice import FileSlice
from .structs import *

log = logging.getLogger(__name__)


class Structure(object):
    """An on-disk structure at a fixed offset, decoded field by field.

    Views hold no data of their own; every field access is a fresh locked
    read through the owning volume.
    """

    def __init__(self, volume, offset):
        self.volume = volume
        self.offset = offset

    def __repr__(self):
        return "<%s at 0x%x>" % (self.__class__.__name__, self.offset)

    def readNumber(self, offset, fmt):
        data = self.volume.readExact(self.offset + offset, fmt.sizeof())
        return fmt.parse(data)

    def readUInt16(self, offset):
        return self.readNumber(offset, Int16ub)

    def readUInt32(self, offset):
        return self.readNumber(offset, Int32ub)

    def readUInt64(self, offset):
        return self.readNumber(offset, Int64ub)

    def readDate(self, offset, local=False):
        return hfs_date(self.readUInt32(offset), local)

    def readStruct(self, struct):
        data = self.volume.readExact(self.offset, struct.sizeof())
        return struct.parse(data)


def _subcon(struct, name):
    for subcon in struct.subcons:
        if subcon.name == name:
            return subcon
    raise KeyError(name)

def field(struct, name):
    offset = offsetof(struct, name)
    fmt = _subcon(struct, name)
    return property(lambda self: self.readNumber(offset, fmt))

def datefield(struct, name, local=False):
    offset = offsetof(struct, name)
    return property(lambda self: self.readDate(offset, local))


class ExtentDescriptor(Structure):
    startBlock = field(HFSPlusExtentDescriptor, "startBlock")
    blockCount = field(HFSPlusExtentDescriptor, "blockCount")

    def parse(self):
        return self.readStruct(HFSPlusExtentDescriptor)

    def __str__(self):
        return ("Start block: %d\n"
                "Block count: %d\n") % (self.startBlock, self.blockCount)


class ForkData(Structure):
    logicalSize = field(HFSPlusForkData, "logicalSize")
    clumpSize = field(HFSPlusForkData, "clumpSize")
    totalBlocks = field(HFSPlusForkData, "totalBlocks")

    numExtentDescriptors = kHFSPlusExtentDensity

    def getExtentDescriptor(self, index):
        if not 0 <= index < self.numExtentDescriptors:
            raise IndexError("extent descriptor index %d out of range" % index)
        return ExtentDescriptor(self.volume,
            self.offset + OFFSET_FORK_DATA_EXTENT_RECORD + SIZE_EXTENT_DESCRIPTOR * index)

    @property
    def extents(self):
        return [self.getExtentDescriptor(i) for i in range(self.numExtentDescriptors)]

    def parse(self):
        return self.readStruct(HFSPlusForkData)

    def __str__(self):
        return ("Logical size: %d\n"
                "Clump size: %d\n"
                "Total blocks: %d\n") % (self.logicalSize, self.clumpSize, self.totalBlocks)


def forkfield(name):
    offset = offsetof(HFSPlusVolumeHeader, name)
    return property(lambda self: ForkData(self.volume, self.offset + offset))


class VolumeHeader(Structure):
    def __init__(self, volume, offset=OFFSET_VOLUME_HEADER):
        Structure.__init__(self, volume, offset)

    def validate(self):
        signatures = [kHFSPlusSignature]
        if self.volume.options.acceptHFSX:
            signatures.append(kHFSXSignature)
        signature = self.volume.validateBytes(self.offset, *signatures)
        if signature == kHFSXSignature:
            log.warning("HFSX volume at 0x%x, opening as HFS+", self.offset)

    signature = field(HFSPlusVolumeHeader, "signature")
    version = field(HFSPlusVolumeHeader, "version")
    attributes = field(HFSPlusVolumeHeader, "attributes")
    lastMountedVersion = field(HFSPlusVolumeHeader, "lastMountedVersion")
    journalInfoBlock = field(HFSPlusVolumeHeader, "journalInfoBlock")

    # createDate is the one date HFS+ keeps in local time
    createDate = datefield(HFSPlusVolumeHeader, "createDate", local=True)
    modifyDate = datefield(HFSPlusVolumeHeader, "modifyDate")
    backupDate = datefield(HFSPlusVolumeHeader, "backupDate")
    checkedDate = datefield(HFSPlusVolumeHeader, "checkedDate")

    fileCount = field(HFSPlusVolumeHeader, "fileCount")
    folderCount = field(HFSPlusVolumeHeader, "folderCount")
    blockSize = field(HFSPlusVolumeHeader, "blockSize")
    totalBlocks = field(HFSPlusVolumeHeader, "totalBlocks")
    freeBlocks = field(HFSPlusVolumeHeader, "freeBlocks")
    nextCatalogID = field(HFSPlusVolumeHeader, "nextCatalogID")
    writeCount = field(HFSPlusVolumeHeader, "writeCount")

    allocationFile = forkfield("allocationFile")
    extentsFile = forkfield("extentsFile")
    catalogFile = forkfield("catalogFile")
    attributesFile = forkfield("attributesFile")
    startupFile = forkfield("startupFile")

    @property
    def isJournaled(self):
        return bool(self.attributes & (1 << kHFSVolumeJournaledBit))

    def parse(self):
        """Decode the whole header in a single transaction."""
        return self.readStruct(HFSPlusVolumeHeader)

    def __str__(self):
        return ("Version: %d\n"
                "Folder count: %d\n"
                "Modify date: %s\n"
                "Backup date: %s\n"
                "Checked date: %s\n"
                "File count: %d\n"
                "Block size: %d\n"
                "Total blocks: %d\n"
                "Free blocks: %d\n") % (
            self.version, self.folderCount,
            self.modifyDate, self.backupDate, self.checkedDate,
            self.fileCount, self.blockSize, self.totalBlocks, self.freeBlocks)


class HFSVolume(Structure):
    """Owns the block device; all structure reads go through here."""

    def __init__(self, bdev, options=None):
        Structure.__init__(self, self, 0)
        self.options = options or Options()
        self._bdev = bdev
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        with self._lock:
            self._bdev.close()

    def read(self, offset, size):
        with self._lock:
            self._bdev.seek(offset)
            return self._bdev.read(size)

    def readExact(self, offset, size):
        data = self.read(offset, size)
        if len(data) != size:
            raise ShortReadError(offset, size, len(data))
        return data

    def validateBytes(self, offset, *expected):
        data = self.readExact(offset, len(expected[0]))
        if data not in expected:
            raise InvalidVolumeHeaderError(
                "bad signature %r at 0x%x" % (data, offset))
        return data

    def getVolumeHeader(self):
        header = VolumeHeader(self, self.options.volumeHeaderOffset)
        header.validate()
        return header

    header = property(getVolumeHeader)

    @property
    def blockSize(self):
        return self.header.blockSize

    def openFork(self, name):
        fileIDs = dict(SPECIAL_FILES)
        if name not in fileIDs:
            raise ValueError("unknown special file %r" % name)
        return HFSFile(self, getattr(self.header, name), fileIDs[name])


def openImage(filename, options=None):
    options = options or Options()
    f = open(filename, "rb")
    try:
        bdev = f
        if options.wantsSlice():
            bdev = FileSlice(f, options.partitionOffset, options.partitionLength)
    except Exception:
        f.close()
        raise
    log.debug("opened %s (partition offset %d)", filename, options.partitionOffset)
    return HFSVolume(bdev, options)
