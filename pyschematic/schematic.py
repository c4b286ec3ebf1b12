'''
Schematic documents: a box of blocks stored as flat Blocks and Data arrays
in a gzipped NBT compound.

Two variants share one codec. PocketSchematic writes only the block arrays
and keeps its dimensions as set. LegacySchematic is the PC layout, which also
carries Entities and TileEntities, and derives its dimensions from the block
list it holds when encoding.

Both store blocks in y, z, x order (see box.blockIndex); they differ in the
order iterBlocks() walks them.
'''

import itertools
from logging import getLogger

from numpy import uint8, zeros

from . import nbt, schematicbase
from .box import BoundingBox, blockIndex
from .compression import DEFAULT_COMPRESSION_LEVEL, deflate, inflate
from .materials import (alphaMaterials, isLegacyMaterials, materialsNamed, MCMaterials, namedMaterials,
                        pocketMaterials, remapLegacyArrays, remapLegacyBlock, unknownMaterials)
from .schematicbase import (BlockDescriptor, Blocks, BufferSizeError, CorruptStream, Data, DecodeError,
                            Entities, Height, Length, MalformedTag, Materials, MissingField, TileEntities, Width)

log = getLogger(__name__)
warn, error, info, debug = log.warning, log.error, log.info, log.debug

# Width, Height and Length are stored as TAG_Short
MAX_DIMENSION = 32767

__all__ = ['Schematic', 'PocketSchematic', 'LegacySchematic', 'GrowableBuffer', 'fromTag', 'fromString', 'fromFile', 'loadRootTag']


class GrowableBuffer(object):
    """A uint8 buffer that grows when written past its end. Capacity at
    least doubles on each reallocation, so filling n bytes in any order
    costs amortized O(n). Bytes never written read as zero."""

    def __init__(self, capacity=0):
        self._array = zeros(capacity, uint8)
        self._length = 0

    def __len__(self):
        return self._length

    def __getitem__(self, index):
        if not 0 <= index < self._length:
            raise IndexError("GrowableBuffer index {0} out of range".format(index))
        return int(self._array[index])

    def __setitem__(self, index, value):
        if index < 0:
            raise IndexError("GrowableBuffer index {0} out of range".format(index))
        if index >= self._length:
            self.grow(index + 1)
        self._array[index] = value

    @property
    def capacity(self):
        return len(self._array)

    def grow(self, length):
        if length > len(self._array):
            capacity = max(length, 2 * len(self._array))
            debug(u"Growing block buffer from {0} to {1} bytes".format(len(self._array), capacity))
            newArray = zeros(capacity, uint8)
            newArray[:self._length] = self._array[:self._length]
            self._array = newArray
        self._length = max(self._length, length)

    def toArray(self, length=None):
        """Returns a copy of the contents, zero-padded to length."""
        if length is None:
            length = self._length
        self.grow(length)
        return self._array[:length].copy()


def _checkDimensions(size):
    for name, value in zip((Width, Height, Length), size):
        if not 0 <= value <= MAX_DIMENSION:
            raise ValueError("{0} {1} is outside 0..{2}".format(name, value, MAX_DIMENSION))


def _checkBlock(block):
    if not 0 <= block.ID <= 0xFF:
        raise ValueError("Block id {0} at {1} is outside 0..255".format(block.ID, block.position))
    if not 0 <= block.blockData <= 0xF:
        raise ValueError("Block data {0} at {1} is outside 0..15".format(block.blockData, block.position))


class Schematic(object):
    """Common base of PocketSchematic and LegacySchematic.

    Width, Height and Length are the extents along x, y and z. Blocks and
    Data are flat uint8 arrays indexed by box.blockIndex. Materials is the
    file's version tag, one of "Classic", "Alpha", "Pocket" or "Unknown";
    blocks from any but "Pocket" are remapped to current ids by iterBlocks().

    A new schematic is empty (0x0x0) unless given a shape. decode(),
    setShape(), setBlocks() and setBlockArray() fill it; encode() can be
    called any number of times and leaves the fields readable.
    """
    defaultMaterials = unknownMaterials.name

    def __init__(self, shape=None, mats=None, filename=None):
        if isinstance(mats, MCMaterials):
            mats = mats.name
        self.Materials = mats or self.defaultMaterials
        self.filename = filename

        self.Width = self.Height = self.Length = 0
        self.Blocks = zeros(0, uint8)
        self.Data = zeros(0, uint8)

        if shape is not None:
            self.setShape(shape)

    def __str__(self):
        return u"{0}(shape={1}, materials={2}, filename=\"{3}\")".format(
            self.__class__.__name__, self.size, self.Materials, self.filename or u"")

    @property
    def materials(self):
        return namedMaterials.get(self.Materials, unknownMaterials)

    @property
    def size(self):
        return self.Width, self.Height, self.Length

    @property
    def volume(self):
        return self.Width * self.Height * self.Length

    @property
    def bounds(self):
        return BoundingBox((0, 0, 0), self.size)

    @classmethod
    def _isTagLevel(cls, root_tag):
        raise NotImplementedError

    def _positions(self):
        """Every (x, y, z) in the volume, in this variant's iteration order."""
        raise NotImplementedError

    def _blocksChanged(self):
        pass

    # decoding

    def decode(self, data):
        """Replace this schematic's contents with the gzipped schematic in
        data. Raises DecodeError chained from the underlying CorruptStream,
        MalformedTag or MissingField; on failure nothing is changed."""
        self.loadTag(loadRootTag(data))
        return self

    def loadTag(self, root_tag):
        try:
            fields = self._readTag(root_tag)
        except (MalformedTag, MissingField) as e:
            error(u"Incorrect schematic format in {0}: {1}".format(self.filename or u"data", e))
            raise DecodeError(u"Incorrect schematic format ({0})".format(e)) from e

        for name, value in fields.items():
            setattr(self, name, value)
        self._blocksChanged()
        debug(u"Loaded {0}".format(self))

    def _readTag(self, root_tag):
        fields = {}
        for name in (Width, Height, Length):
            value = root_tag.require(name, nbt.TAG_Short).value
            if value < 0:
                raise MalformedTag("Negative {0} {1}".format(name, value))
            fields[name] = value

        if Materials in root_tag:
            fields[Materials] = root_tag.require(Materials, nbt.TAG_String).value
            materialsNamed(fields[Materials])  # warns if unrecognized
        else:
            warn(u"Schematic has no Materials tag, assuming {0}".format(self.defaultMaterials))
            fields[Materials] = self.defaultMaterials

        fields[Blocks] = root_tag.require(Blocks, nbt.TAG_Byte_Array).value.ravel()
        fields[Data] = root_tag.require(Data, nbt.TAG_Byte_Array).value.ravel()
        return fields

    # encoding

    def encode(self, compresslevel=DEFAULT_COMPRESSION_LEVEL):
        """Returns the schematic as gzipped NBT. Raises BufferSizeError if
        Blocks or Data does not hold exactly Width*Height*Length bytes."""
        self._prepareEncode()
        self.checkBuffers()
        return deflate(self.saveTag().save(), compresslevel)

    def _prepareEncode(self):
        pass

    def checkBuffers(self):
        for name, value in zip((Width, Height, Length), self.size):
            if not 0 <= value <= MAX_DIMENSION:
                raise BufferSizeError("{0} {1} does not fit in a TAG_Short".format(name, value))
        volume = self.volume
        if self.Blocks.size != volume or self.Data.size != volume:
            raise BufferSizeError("Blocks has {0} and Data has {1} entries, {2}x{3}x{4} needs {5}".format(
                self.Blocks.size, self.Data.size, self.Width, self.Height, self.Length, volume))

    def saveTag(self):
        root_tag = nbt.TAG_Compound(name="Schematic")
        root_tag[Height] = nbt.TAG_Short(self.Height)
        root_tag[Length] = nbt.TAG_Short(self.Length)
        root_tag[Width] = nbt.TAG_Short(self.Width)
        root_tag[Materials] = nbt.TAG_String(self.Materials)
        root_tag[Blocks] = nbt.TAG_Byte_Array(self.Blocks.ravel())
        root_tag[Data] = nbt.TAG_Byte_Array(self.Data.ravel())
        return root_tag

    def saveToFile(self, filename=None):
        """ save to file named filename, or use self.filename. """
        if filename is None:
            filename = self.filename
        if filename is None:
            warn(u"Attempted to save an unnamed schematic in place")
            return

        schematicbase.filesystem.writeAll(filename, self.encode())
        self.filename = filename
        info(u"Saved {0}".format(self))

    # blocks

    def _iterBlocks(self, remap):
        blocks, data = self.Blocks.ravel(), self.Data.ravel()
        width, length = self.Width, self.Length
        for x, y, z in self._positions():
            index = blockIndex(x, y, z, width, length)
            blockID = int(blocks[index]) if index < blocks.size else 0
            blockData = int(data[index]) & 0xF if index < data.size else 0
            if remap:
                blockID, blockData = remapLegacyBlock(blockID, blockData)
            yield BlockDescriptor(blockID, blockData, x, y, z)

    def iterBlocks(self):
        """Yields a BlockDescriptor for every cell of the volume. Ids from
        legacy materials are translated with materials.remapLegacyBlock.
        Each call starts a new walk over the current contents."""
        return self._iterBlocks(isLegacyMaterials(self.Materials))

    def iterResolvedBlocks(self, registry=None):
        """Yields (block, (x, y, z)) with each block looked up in registry,
        pocketMaterials by default."""
        if registry is None:
            registry = pocketMaterials
        for block in self.iterBlocks():
            yield registry.blockWithID(block.ID, block.blockData), block.position

    def blockAt(self, x, y, z):
        if (x, y, z) not in self.bounds:
            return 0
        index = blockIndex(x, y, z, self.Width, self.Length)
        if index >= self.Blocks.size:
            return 0
        return int(self.Blocks.ravel()[index])

    def blockDataAt(self, x, y, z):
        if (x, y, z) not in self.bounds:
            return 0
        index = blockIndex(x, y, z, self.Width, self.Length)
        if index >= self.Data.size:
            return 0
        return int(self.Data.ravel()[index]) & 0xF

    def setShape(self, shape):
        """shape is a tuple of (width, height, length).  sets the
        schematic's properties and clears the block and data arrays"""
        _checkDimensions(shape)
        self.Width, self.Height, self.Length = shape
        self.Blocks = zeros(self.volume, uint8)
        self.Data = zeros(self.volume, uint8)
        self._blocksChanged()

    def setBlocks(self, box, blocks):
        """Size the schematic to box and write blocks into it. Block positions
        are absolute; box's minimum corner becomes (0, 0, 0). Cells no block
        is given for are air. Raises IndexOutOfBounds for a block outside box."""
        size = tuple(box.size)
        _checkDimensions(size)
        volume = box.volume

        blockBuffer = GrowableBuffer()
        dataBuffer = GrowableBuffer()
        for block in blocks:
            _checkBlock(block)
            index = box.relativeIndex(block.x, block.y, block.z)
            blockBuffer[index] = block.ID
            dataBuffer[index] = block.blockData

        self.Width, self.Height, self.Length = size
        self.Blocks = blockBuffer.toArray(volume)
        self.Data = dataBuffer.toArray(volume)
        self._blocksChanged()

    def setBlockArray(self, blocks):
        """Like setBlocks, with the box taken as the smallest one holding
        every block."""
        blocks = list(blocks)
        box = BoundingBox.fromPositions((block.x, block.y, block.z) for block in blocks)
        self.setBlocks(box, blocks)


class PocketSchematic(Schematic):
    """Schematic holding only block arrays. Iterates x, then z, then y
    (y varies fastest)."""
    defaultMaterials = pocketMaterials.name

    @classmethod
    def _isTagLevel(cls, root_tag):
        return not LegacySchematic._isTagLevel(root_tag)

    def _positions(self):
        for x, z, y in itertools.product(range(self.Width), range(self.Length), range(self.Height)):
            yield x, y, z


class LegacySchematic(Schematic):
    """PC schematic, as written by MCEdit. Iterates x, then y, then z (z
    varies fastest).

    The Entities and TileEntities are nbt tags, usually TAG_List objects
    containing TAG_Compounds; they are carried through decode and encode
    untouched.

    encode() derives Width, Height and Length from the highest x, y and z in
    blockList (plus one), with the volume assumed to start at the origin, and
    rebuilds the arrays from that list. decode() and the populate methods keep
    blockList in step with the arrays; setBlockList() replaces it outright.
    """
    defaultMaterials = alphaMaterials.name

    def __init__(self, shape=None, mats=None, filename=None):
        self.Entities = nbt.TAG_List()
        self.TileEntities = nbt.TAG_List()
        self._blockList = None
        super(LegacySchematic, self).__init__(shape, mats, filename)

    @classmethod
    def _isTagLevel(cls, root_tag):
        return Entities in root_tag or TileEntities in root_tag

    def _positions(self):
        return itertools.product(range(self.Width), range(self.Height), range(self.Length))

    def _blocksChanged(self):
        # None means blockList mirrors the arrays
        self._blockList = None

    def _readTag(self, root_tag):
        fields = super(LegacySchematic, self)._readTag(root_tag)
        fields[Entities] = root_tag[Entities] if Entities in root_tag else None
        fields[TileEntities] = root_tag[TileEntities] if TileEntities in root_tag else None
        return fields

    def saveTag(self):
        root_tag = super(LegacySchematic, self).saveTag()
        if self.Entities is not None:
            root_tag[Entities] = self.Entities
        if self.TileEntities is not None:
            root_tag[TileEntities] = self.TileEntities
        return root_tag

    @property
    def blockList(self):
        """The held blocks as BlockDescriptors with raw (unremapped) ids."""
        if self._blockList is None:
            self._blockList = list(self._iterBlocks(remap=False))
        return self._blockList

    def setBlockList(self, blocks):
        """Hold blocks as given. Positions are relative to the schematic's
        origin; the next encode() sizes the schematic to fit them."""
        self._blockList = list(blocks)

    def fixBlockIds(self):
        """Replace held blocks whose ids the current registry numbers
        differently, keeping their positions."""
        volume = self.volume
        if self._blockList is None and self.Blocks.size == volume and self.Data.size == volume:
            self.Blocks, self.Data = remapLegacyArrays(self.Blocks.ravel(), self.Data.ravel())
            return

        fixed = []
        for block in self.blockList:
            blockID, blockData = remapLegacyBlock(block.ID, block.blockData)
            fixed.append(block._replace(ID=blockID, blockData=blockData))
        self._blockList = fixed

    def _prepareEncode(self):
        if self._blockList is None:
            if not self.volume:
                self.Width = self.Height = self.Length = 0
            return

        blocks = self._blockList
        if blocks:
            size = (max(b.x for b in blocks) + 1,
                    max(b.y for b in blocks) + 1,
                    max(b.z for b in blocks) + 1)
        else:
            size = (0, 0, 0)
        for name, value in zip((Width, Height, Length), size):
            if value > MAX_DIMENSION:
                raise BufferSizeError("{0} {1} does not fit in a TAG_Short".format(name, value))

        width, height, length = size
        volume = width * height * length
        newBlocks = zeros(volume, uint8)
        newData = zeros(volume, uint8)
        for b in blocks:
            _checkBlock(b)
            index = blockIndex(b.x, b.y, b.z, width, length, height)
            newBlocks[index] = b.ID
            newData[index] = b.blockData

        self.Width, self.Height, self.Length = size
        self.Blocks = newBlocks
        self.Data = newData
        debug(u"Derived shape {0} from {1} held blocks".format(size, len(blocks)))


def loadRootTag(data):
    """Inflate and parse schematic data. Raises DecodeError."""
    try:
        return nbt.load(buf=inflate(data))
    except (CorruptStream, MalformedTag) as e:
        error(u"Malformed schematic data: {0}".format(e))
        raise DecodeError(u"Malformed schematic data ({0})".format(e)) from e


def fromTag(root_tag, filename=None):
    """Build the schematic variant root_tag holds: LegacySchematic when it
    carries Entities or TileEntities, PocketSchematic otherwise."""
    for cls in (LegacySchematic, PocketSchematic):
        if cls._isTagLevel(root_tag):
            debug(u"Detected {0}".format(cls.__name__))
            schematic = cls(filename=filename)
            schematic.loadTag(root_tag)
            return schematic


def fromString(data):
    return fromTag(loadRootTag(data))


def fromFile(filename):
    info(u"Identifying " + filename)
    return fromTag(loadRootTag(schematicbase.filesystem.readAll(filename)), filename)
