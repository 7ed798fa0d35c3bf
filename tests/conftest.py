import pytest

from binwriter import make_document, write_document
from propbin import (
    EmbedValue,
    Hash32,
    Hash64,
    List2Value,
    ListValue,
    MapValue,
    OptionValue,
    PointerValue,
    PrimitiveValue,
    Type,
)


def field(name, value):
    return (Hash32.from_name(name), value)


@pytest.fixture
def skin_document():
    """A version 3 document touching every value kind."""
    material = EmbedValue(Hash32.from_name("StaticMaterialDef"), [
        field("name", PrimitiveValue(Type.STRING, b"Characters/Ahri/Materials/Skin0")),
        field("shaderLink", PrimitiveValue(Type.LINK, Hash32.from_name("Shaders/SkinnedMesh"))),
        field("params", ListValue(Type.EMBED, [
            EmbedValue(Hash32.from_name("StaticMaterialShaderParamDef"), [
                field("name", PrimitiveValue(Type.STRING, b"Fresnel")),
                field("value", PrimitiveValue(Type.VEC4, (1.0, 0.5, 0.25, 0.0))),
            ]),
        ])),
    ])
    skin_fields = [
        field("championSkinName", PrimitiveValue(Type.STRING, b"Ahri")),
        field("enabled", PrimitiveValue(Type.BOOL, True)),
        field("locked", PrimitiveValue(Type.FLAG, False)),
        field("tier", PrimitiveValue(Type.I8, -3)),
        field("rarity", PrimitiveValue(Type.U8, 200)),
        field("offset", PrimitiveValue(Type.I16, -1234)),
        field("flags", PrimitiveValue(Type.U16, 0xBEEF)),
        field("skinId", PrimitiveValue(Type.I32, -70000)),
        field("price", PrimitiveValue(Type.U32, 1350)),
        field("seed", PrimitiveValue(Type.I64, -(2 ** 40))),
        field("guid", PrimitiveValue(Type.U64, 2 ** 63 + 5)),
        field("scale", PrimitiveValue(Type.F32, 1.25)),
        field("uv", PrimitiveValue(Type.VEC2, (0.5, 0.75))),
        field("position", PrimitiveValue(Type.VEC3, (1.0, -2.0, 3.5))),
        field("transform", PrimitiveValue(Type.MTX44, tuple(float(i) for i in range(16)))),
        field("tint", PrimitiveValue(Type.RGBA, (255, 128, 0, 64))),
        field("iconHash", PrimitiveValue(Type.HASH, Hash32.from_name("Icons/Ahri"))),
        field("meshFile", PrimitiveValue(Type.FILE, Hash64(0x0123456789ABCDEF))),
        field("loadScreen", OptionValue(Type.STRING, [PrimitiveValue(Type.STRING, b"Ahri_0.dds")])),
        field("voiceOver", OptionValue(Type.U32, [])),
        field("tags", ListValue(Type.HASH, [
            PrimitiveValue(Type.HASH, Hash32(1)),
            PrimitiveValue(Type.HASH, Hash32(2)),
        ])),
        field("weights", List2Value(Type.F32, [PrimitiveValue(Type.F32, 0.5)])),
        field("materialOverrides", MapValue(Type.STRING, Type.POINTER, [
            (PrimitiveValue(Type.STRING, b"body"), PointerValue(material.name, list(material.items))),
            (PrimitiveValue(Type.STRING, b"tail"), PointerValue()),
        ])),
        field("material", material),
    ]
    return make_document(
        [
            ("Characters/Ahri/Skins/Skin0", "SkinCharacterDataProperties", skin_fields),
            ("Characters/Ahri/Skins/Skin0/Resources", "ResourceResolver", [
                field("resourceMap", MapValue(Type.HASH, Type.LINK, [])),
            ]),
        ],
        version=3,
        linked=[b"DATA/Characters/Ahri/Ahri.bin"],
    )


@pytest.fixture
def skin_bytes(skin_document):
    return write_document(skin_document)


@pytest.fixture
def bin_file(tmp_path, skin_bytes):
    path = tmp_path / "skin0.bin"
    path.write_bytes(skin_bytes)
    return path
