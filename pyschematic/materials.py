'''
Block registries for each schematic "Materials" tag, and the table that
translates block ids found in older schematics into ids the current block
registry understands.
'''
from logging import getLogger

from numpy import arange, full, int16, uint8, where

log = getLogger(__name__)
warn, error, info, debug = log.warning, log.error, log.info, log.debug


class Block(object):
    def __init__(self, materials, blockID, blockData=0, **kw):
        """
        Defines a blocktype.
        Keyword parameters:
            name: Human-readable name of the block
            brightness: 0-15 (default 0)
            opacity: 0-15 (default 15)
            aka: Additional keywords to use for searching
        """
        object.__init__(self)
        self.materials = materials
        self.name = kw.pop('name', materials.names[blockID][blockData])

        self.brightness = kw.pop('brightness', materials.defaultBrightness)
        self.opacity = kw.pop('opacity', materials.defaultOpacity)
        self.aka = kw.pop('aka', "")

        self.ID = blockID
        self.blockData = blockData

    def __str__(self):
        return "<Block {name} ({id}:{data}) hasAlternate:{ha}>".format(
            name=self.name, id=self.ID, data=self.blockData, ha=self.hasAlternate)

    def __repr__(self):
        return str(self)

    def __eq__(self, rhs):
        if not isinstance(rhs, Block):
            return NotImplemented
        return (self.materials, self.ID, self.blockData) == (rhs.materials, rhs.ID, rhs.blockData)

    def __hash__(self):
        return hash((self.materials.name, self.ID, self.blockData))

    hasAlternate = False


class MCMaterials(object):
    """A block registry: names and properties for every (id, data) pair a
    schematic written with these materials may contain."""
    defaultBrightness = 0
    defaultOpacity = 15
    name = "Unknown"

    def __init__(self, defaultName="Unused Block"):
        object.__init__(self)
        self.defaultName = defaultName

        self.names = [[defaultName] * 16 for i in range(256)]
        self.aka = [""] * 256
        self.allBlocks = []
        self.blocksByID = {}

    def __repr__(self):
        return "<MCMaterials ({0})>".format(self.name)

    def blocksMatching(self, name):
        name = name.lower()
        return [v for v in self.allBlocks if name in v.name.lower() or name in v.aka.lower()]

    def blockWithID(self, id, data=0):
        """Look up a registered block. Unregistered (id, data) pairs get a
        placeholder named after defaultName, or after the id's base block."""
        if (id, data) in self.blocksByID:
            return self.blocksByID[id, data]
        else:
            bl = Block(self, id, blockData=data)
            bl.hasAlternate = True
            return bl

    def Block(self, blockID, blockData=0, **kw):
        block = Block(self, blockID, blockData, **kw)

        self.aka[blockID] = block.aka

        if blockData == 0:
            self.names[blockID] = [block.name] * 16
        else:
            self.names[blockID][blockData] = block.name

        if block.name is not self.defaultName:
            self.allBlocks.append(block)

        if (blockID, 0) in self.blocksByID:
            self.blocksByID[blockID, 0].hasAlternate = True
            block.hasAlternate = True

        self.blocksByID[blockID, blockData] = block

        return block


###
### MATERIALS for PC schematics, Alpha and later ###
###

alphaMaterials = MCMaterials(defaultName="Future Block!")
alphaMaterials.name = "Alpha"
am = alphaMaterials
am.Air = am.Block(0, name="Air", opacity=0)
am.Stone = am.Block(1, name="Stone")
am.Grass = am.Block(2, name="Grass")
am.Dirt = am.Block(3, name="Dirt")
am.Cobblestone = am.Block(4, name="Cobblestone")
am.WoodPlanks = am.Block(5, name="Wood Planks")
am.Sapling = am.Block(6, name="Sapling", opacity=0)
am.Bedrock = am.Block(7, name="Bedrock", aka="Adminium")
am.WaterActive = am.Block(8, name="Water (active)", opacity=3)
am.Water = am.Block(9, name="Water", opacity=3)
am.LavaActive = am.Block(10, name="Lava (active)", brightness=15)
am.Lava = am.Block(11, name="Lava", brightness=15)
am.Sand = am.Block(12, name="Sand")
am.Gravel = am.Block(13, name="Gravel")
am.Wood = am.Block(17, name="Wood")
am.Leaves = am.Block(18, name="Leaves", opacity=1)
am.Glass = am.Block(20, name="Glass", opacity=0)
am.WhiteWool = am.Block(35, name="White Wool", aka="Cloth")
am.DoubleStoneSlab = am.Block(43, name="Double Stone Slab")
am.StoneSlab = am.Block(44, name="Stone Slab")
am.Torch = am.Block(50, name="Torch", brightness=14, opacity=0)
am.Chest = am.Block(54, name="Chest")
am.Fence = am.Block(85, name="Fence", opacity=0)
am.StainedGlass = am.Block(95, name="Stained Glass", opacity=0)
am.GlassPane = am.Block(102, name="Glass Pane", opacity=0)
am.DoubleWoodenSlab = am.Block(125, name="Double Wooden Slab")
am.WoodenSlab = am.Block(126, name="Wooden Slab")
am.StainedGlassPane = am.Block(160, name="Stained Glass Pane", opacity=0)
am.SpruceFence = am.Block(188, name="Spruce Fence", opacity=0)
am.BirchFence = am.Block(189, name="Birch Fence", opacity=0)
am.JungleFence = am.Block(190, name="Jungle Fence", opacity=0)
am.DarkOakFence = am.Block(191, name="Dark Oak Fence", opacity=0)
am.AcaciaFence = am.Block(192, name="Acacia Fence", opacity=0)

del am

from .classicmaterials import classicMaterials
from .pocketmaterials import pocketMaterials

unknownMaterials = MCMaterials(defaultName="Unknown Block")
unknownMaterials.name = "Unknown"

namedMaterials = dict((i.name, i) for i in (alphaMaterials, classicMaterials, pocketMaterials, unknownMaterials))


def materialsNamed(name):
    """The registry for a schematic's Materials string. Unrecognized names
    get unknownMaterials."""
    if name not in namedMaterials:
        warn(u"Unrecognized schematic materials {0!r}, treating as {1}".format(name, unknownMaterials.name))
        return unknownMaterials
    return namedMaterials[name]


def isLegacyMaterials(name):
    """Schematics not written for the Pocket registry need their ids remapped."""
    return name != pocketMaterials.name


# Block ids that PC schematics use but the current registry numbers
# differently. None keeps the block's own data value; otherwise the data
# value is replaced, since each wood fence became a fence subtype.
legacyRemapTable = {
    95: (pocketMaterials.StainedGlass.ID, None),
    125: (pocketMaterials.DoubleWoodenSlab.ID, None),
    126: (pocketMaterials.WoodenSlab.ID, None),
    160: (pocketMaterials.StainedGlassPane.ID, None),
    188: (pocketMaterials.Fence.ID, pocketMaterials.SpruceFence.blockData),
    189: (pocketMaterials.Fence.ID, pocketMaterials.BirchFence.blockData),
    190: (pocketMaterials.Fence.ID, pocketMaterials.JungleFence.blockData),
    191: (pocketMaterials.Fence.ID, pocketMaterials.DarkOakFence.blockData),
    192: (pocketMaterials.Fence.ID, pocketMaterials.AcaciaFence.blockData),
}

# lookup tables for remapping whole Blocks/Data arrays; -1 keeps the data value
legacyBlockIDTable = arange(256, dtype=uint8)
legacyBlockDataTable = full(256, -1, dtype=int16)

for legacyID, (newID, newData) in legacyRemapTable.items():
    legacyBlockIDTable[legacyID] = newID
    if newData is not None:
        legacyBlockDataTable[legacyID] = newData
del legacyID, newID, newData


def remapLegacyBlock(blockID, blockData):
    """Returns the (id, data) pair the current registry uses for a block from
    a legacy schematic. Ids missing from the table pass through unchanged."""
    if blockID not in legacyRemapTable:
        return blockID, blockData
    newID, newData = legacyRemapTable[blockID]
    if newData is None:
        newData = blockData
    return newID, newData


def remapLegacyArrays(blocks, data):
    """Vectorized remapLegacyBlock over uint8 Blocks and Data arrays of the
    same shape. Returns new arrays; the inputs are not modified."""
    fixedData = legacyBlockDataTable[blocks]
    newData = where(fixedData >= 0, fixedData, data).astype(uint8)
    return legacyBlockIDTable[blocks], newData
