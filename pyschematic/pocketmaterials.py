from .materials import MCMaterials

pocketMaterials = MCMaterials(defaultName="Not present in Pocket Edition")
pocketMaterials.name = "Pocket"
pm = pocketMaterials
pm.Air = pm.Block(0, name="Air", opacity=0)
pm.Stone = pm.Block(1, name="Stone")
pm.Grass = pm.Block(2, name="Grass")
pm.Dirt = pm.Block(3, name="Dirt")
pm.Cobblestone = pm.Block(4, name="Cobblestone")
pm.WoodPlanks = pm.Block(5, name="Wood Planks")
pm.Sapling = pm.Block(6, name="Sapling", opacity=0)
pm.Bedrock = pm.Block(7, name="Bedrock")
pm.WaterActive = pm.Block(8, name="Water (active)", opacity=3)
pm.Water = pm.Block(9, name="Water", opacity=3)
pm.LavaActive = pm.Block(10, name="Lava (active)", brightness=15)
pm.Lava = pm.Block(11, name="Lava", brightness=15)
pm.Sand = pm.Block(12, name="Sand")
pm.Gravel = pm.Block(13, name="Gravel")
pm.Wood = pm.Block(17, name="Wood")
pm.Leaves = pm.Block(18, name="Leaves", opacity=1)
pm.Glass = pm.Block(20, name="Glass", opacity=0)
pm.WhiteWool = pm.Block(35, name="White Wool")
pm.DoubleStoneSlab = pm.Block(43, name="Double Stone Slab")
pm.StoneSlab = pm.Block(44, name="Stone Slab")
pm.Torch = pm.Block(50, name="Torch", brightness=14, opacity=0)
pm.Chest = pm.Block(54, name="Chest")

pm.Fence = pm.Block(85, name="Oak Fence", opacity=0)
pm.SpruceFence = pm.Block(85, blockData=1, name="Spruce Fence", opacity=0)
pm.BirchFence = pm.Block(85, blockData=2, name="Birch Fence", opacity=0)
pm.JungleFence = pm.Block(85, blockData=3, name="Jungle Fence", opacity=0)
pm.AcaciaFence = pm.Block(85, blockData=4, name="Acacia Fence", opacity=0)
pm.DarkOakFence = pm.Block(85, blockData=5, name="Dark Oak Fence", opacity=0)

pm.GlassPane = pm.Block(102, name="Glass Pane", opacity=0)
pm.DoubleWoodenSlab = pm.Block(157, name="Double Wooden Slab")
pm.WoodenSlab = pm.Block(158, name="Wooden Slab")
pm.StainedGlassPane = pm.Block(160, name="Stained Glass Pane", opacity=0)
pm.StainedGlass = pm.Block(241, name="Stained Glass", opacity=0)

pm.AllFences = [
    pm.Fence,
    pm.SpruceFence,
    pm.BirchFence,
    pm.JungleFence,
    pm.AcaciaFence,
    pm.DarkOakFence,
]

del pm
