from .materials import MCMaterials

classicMaterials = MCMaterials(defaultName="Not present in Classic")
classicMaterials.name = "Classic"
cm = classicMaterials
cm.Air = cm.Block(0, name="Air", opacity=0)
cm.Rock = cm.Block(1, name="Rock")
cm.Grass = cm.Block(2, name="Grass")
cm.Dirt = cm.Block(3, name="Dirt")
cm.Cobblestone = cm.Block(4, name="Cobblestone")
cm.WoodPlanks = cm.Block(5, name="Wood Planks")
cm.Sapling = cm.Block(6, name="Sapling", opacity=0)
cm.Adminium = cm.Block(7, name="Adminium")
cm.WaterActive = cm.Block(8, name="Water (active)", opacity=3)
cm.Water = cm.Block(9, name="Water", opacity=3)
cm.LavaActive = cm.Block(10, name="Lava (active)", brightness=15)
cm.Lava = cm.Block(11, name="Lava", brightness=15)
cm.Sand = cm.Block(12, name="Sand")
cm.Gravel = cm.Block(13, name="Gravel")
cm.GoldOre = cm.Block(14, name="Gold Ore")
cm.IronOre = cm.Block(15, name="Iron Ore")
cm.CoalOre = cm.Block(16, name="Coal Ore")
cm.Wood = cm.Block(17, name="Wood")
cm.Leaves = cm.Block(18, name="Leaves", opacity=1)
cm.Sponge = cm.Block(19, name="Sponge")
cm.Glass = cm.Block(20, name="Glass", opacity=0)

for i, name in enumerate((
    "Red", "Orange", "Yellow", "Lime", "Green", "Aqua Green", "Cyan", "Blue",
    "Purple", "Indigo", "Violet", "Magenta", "Pink", "Black", "Gray", "White",
), 21):
    cm.Block(i, name=name + " Cloth")
del i, name

cm.Flower = cm.Block(37, name="Flower", opacity=0)
cm.Rose = cm.Block(38, name="Rose", opacity=0)
cm.BrownMushroom = cm.Block(39, name="Brown Mushroom", opacity=0)
cm.RedMushroom = cm.Block(40, name="Red Mushroom", opacity=0)
cm.BlockOfGold = cm.Block(41, name="Block of Gold")
cm.BlockOfIron = cm.Block(42, name="Block of Iron")
cm.DoubleStoneSlab = cm.Block(43, name="Double Stone Slab")
cm.StoneSlab = cm.Block(44, name="Stone Slab")
cm.Brick = cm.Block(45, name="Brick")
cm.TNT = cm.Block(46, name="TNT")
cm.Bookshelf = cm.Block(47, name="Bookshelf")
cm.MossStone = cm.Block(48, name="Moss Stone")
cm.Obsidian = cm.Block(49, name="Obsidian")

del cm
