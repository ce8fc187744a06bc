from __future__ import annotations

from typing import Dict, Literal

from pydantic import BaseModel, Field

from .config import DEFAULT_DATABASE_URL, GAME_VERSION, MODIFY_ACTION, SKIN_PART, UPLOAD_TIMEOUT_S

SkinDatabase = Literal["normal", "community"]


class SkinInfo(BaseModel):
    name: str
    author: str
    license: str


class UploadTarget(BaseModel):
    """Where and as whom to upload. Always passed in explicitly; never read from the environment here."""

    database_url: str = DEFAULT_DATABASE_URL
    username: str
    password: str
    timeout_s: float = Field(default=UPLOAD_TIMEOUT_S, gt=0)


class UploadForm(BaseModel):
    creator: str
    skin_license: str
    skin_type: SkinDatabase = "normal"
    skinisuhd: bool = False
    skin_pack: str = ""
    game_version: str = GAME_VERSION
    skin_part: str = SKIN_PART
    modifyaction: str = MODIFY_ACTION

    def as_fields(self) -> Dict[str, str]:
        fields = self.model_dump()
        fields["skinisuhd"] = "true" if self.skinisuhd else "false"
        return fields


class DilateRecord(BaseModel):
    """One manifest.jsonl line."""

    skin_name: str
    source_path: str
    output_path: str = ""
    width: int = 0
    height: int = 0
    hd: bool = False
    status: Literal["dilated", "rejected", "uploaded", "upload_failed"]
    error: str = ""
