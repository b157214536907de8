"""Profile textures decoding."""

import base64
import binascii
import logging
from typing import Optional

from pydantic import ValidationError

from .errors import MalformedTextureBlob
from .models import Profile, Textures, TexturesPayload

logger = logging.getLogger(__name__)


def decode_textures_payload(value: str) -> TexturesPayload:
    """Decode a base64 encoded ``textures`` property value.

    Raises:
        MalformedTextureBlob: when the value is not base64 encoded JSON
            with a ``textures`` object.
    """
    try:
        raw = base64.b64decode(value)
        return TexturesPayload.model_validate_json(raw)
    except (binascii.Error, ValueError, ValidationError) as e:
        raise MalformedTextureBlob(f"Invalid textures property: {e}") from e


def extract_textures(profile: Optional[Profile]) -> Textures:
    """Return skin and cape URLs of a profile.

    Only the first property is read. A missing profile, or one without
    properties, has neither skin nor cape.
    """
    if profile is None or not profile.properties:
        return Textures(skin=None, cape=None)

    payload = decode_textures_payload(profile.properties[0].value)
    textures = payload.textures

    return Textures(
        skin=textures.SKIN.url if textures.SKIN else None,
        cape=textures.CAPE.url if textures.CAPE else None,
    )
