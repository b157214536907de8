"""Mojang profile and textures models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileProperty(BaseModel):
    """Signed profile property (``textures`` in practice)."""

    name: str
    value: str
    signature: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class Profile(BaseModel):
    """Player profile as returned by the session server.

    Unknown fields (``profileActions``, ``legacy``...) are kept so the
    profile can be served back unchanged.
    """

    id: str
    name: str
    properties: list[ProfileProperty] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")


class TextureRef(BaseModel):
    """Location of a single texture image."""

    url: str
    metadata: Optional[dict[str, str]] = None


class TextureMap(BaseModel):
    """Textures present on a profile."""

    SKIN: Optional[TextureRef] = None
    CAPE: Optional[TextureRef] = None

    model_config = ConfigDict(extra="ignore")


class TexturesPayload(BaseModel):
    """Decoded ``textures`` property value."""

    timestamp: Optional[int] = None
    profileId: Optional[str] = None
    profileName: Optional[str] = None
    textures: TextureMap

    model_config = ConfigDict(extra="ignore")


class Textures(BaseModel):
    """Skin and cape URLs of a profile."""

    skin: Optional[str] = None
    cape: Optional[str] = None

    model_config = ConfigDict(frozen=True)
