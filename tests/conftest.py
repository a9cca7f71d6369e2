import io

import pytest
from construct import Int16ub, Int32ub, Int64ub

from hfsrescue import HFSVolume

BLOCK_SIZE = 512
IMAGE_BLOCKS = 64
HEADER = 1024

# seconds since 1904
MODIFY_DATE = 3600
BACKUP_DATE = 86400
CHECKED_DATE = 2 * 86400
CREATE_DATE = 3061152000     # 2001-01-01

CATALOG_EXTENTS = [(10, 2), (20, 3), (40, 1)]
CATALOG_SIZE = 5 * BLOCK_SIZE + 100


def put(buf, offset, fmt, value):
    data = fmt.build(value)
    buf[offset:offset + len(data)] = data


def put_fork(buf, offset, logicalSize, extents, clumpSize=0, totalBlocks=None):
    if totalBlocks is None:
        totalBlocks = sum(count for _, count in extents) & 0xFFFFFFFF
    put(buf, offset, Int64ub, logicalSize)
    put(buf, offset + 8, Int32ub, clumpSize)
    put(buf, offset + 12, Int32ub, totalBlocks)
    for i, (start, count) in enumerate(extents):
        put(buf, offset + 16 + 8 * i, Int32ub, start)
        put(buf, offset + 16 + 8 * i + 4, Int32ub, count)


def build_image(forks=None, blockSize=BLOCK_SIZE, blocks=IMAGE_BLOCKS, signature=b"H+"):
    """A synthetic HFS+ image; every byte outside the header is i % 251."""
    size = max(blockSize * blocks, HEADER + 512)
    buf = bytearray(i % 251 for i in range(size))
    buf[HEADER:HEADER + 512] = bytes(512)
    buf[HEADER:HEADER + 2] = signature
    put(buf, HEADER + 2, Int16ub, 4)
    put(buf, HEADER + 4, Int32ub, 1 << 13)
    put(buf, HEADER + 16, Int32ub, CREATE_DATE)
    put(buf, HEADER + 20, Int32ub, MODIFY_DATE)
    put(buf, HEADER + 24, Int32ub, BACKUP_DATE)
    put(buf, HEADER + 28, Int32ub, CHECKED_DATE)
    put(buf, HEADER + 32, Int32ub, 11)
    put(buf, HEADER + 36, Int32ub, 7)
    put(buf, HEADER + 40, Int32ub, blockSize)
    put(buf, HEADER + 44, Int32ub, blocks)
    put(buf, HEADER + 48, Int32ub, 5)
    put(buf, HEADER + 64, Int32ub, 42)
    put(buf, HEADER + 68, Int32ub, 9)

    if forks is None:
        forks = {2: (CATALOG_SIZE, CATALOG_EXTENTS)}
    for index, (logicalSize, extents) in forks.items():
        put_fork(buf, HEADER + 112 + 80 * index, logicalSize, extents)
    return buf


def fork_bytes(image, extents, logicalSize, blockSize=BLOCK_SIZE):
    data = b"".join(bytes(image[start * blockSize:(start + count) * blockSize])
                    for start, count in extents)
    return data[:logicalSize]


class RecordingStream(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.reads = []

    def read(self, n=-1):
        self.reads.append((self.tell(), n))
        return super().read(n)


@pytest.fixture
def image():
    return build_image()


@pytest.fixture
def volume(image):
    return HFSVolume(io.BytesIO(bytes(image)))
