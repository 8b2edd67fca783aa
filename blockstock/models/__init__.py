from blockstock.models.inventory import Block, Production, RawMaterial, RawMaterialLog, Sale

__all__ = [
    "Block",
    "Production",
    "RawMaterial",
    "RawMaterialLog",
    "Sale",
]
