"""Configuration schema for the stored remotes list.

Field aliases match the persisted blob (``rclonePath``, ``remotes``,
``enable``) so a configuration written by earlier releases loads unchanged.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, PrivateAttr, validator

from ..core.models import SyncTarget


class RemoteConfig(BaseModel):
    """Configuration for a single sync destination."""

    name: str = Field(default="", description="rclone remote name, e.g. onedrive")
    path: str = Field(default="", description="Remote path, optionally prefixed with 'name:'")
    enable: bool = Field(default=True, description="Whether this remote takes part in a sync run")

    @validator('name', 'path', pre=True)
    def strip_text(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @property
    def remote_address(self) -> str:
        return self.to_target().remote_address

    def to_target(self) -> SyncTarget:
        """Detach an immutable target from this (mutable) configuration entry."""
        return SyncTarget(name=self.name, path=self.path, enabled=self.enable)


class BridgeConfig(BaseModel):
    """Root configuration: rclone executable plus the ordered remotes list.

    An environment override of the executable path changes ``rclone_path`` for
    this process only; :meth:`to_stored_dict` still writes the stored value.
    """

    rclone_path: str = Field(default="", alias="rclonePath", description="Absolute path of the rclone executable")
    remotes: List[RemoteConfig] = Field(default_factory=list, description="Sync destinations in execution order")

    _stored_rclone_path: Optional[str] = PrivateAttr(default=None)

    class Config:
        populate_by_name = True
        validate_assignment = True
        extra = "allow"  # legacy keys survive a load/save cycle

    @validator('rclone_path', pre=True)
    def strip_path(cls, v):
        if v is None:
            return ""
        return str(v).strip()

    @validator('remotes', pre=True)
    def default_remotes(cls, v):
        return [] if v is None else v

    @property
    def has_rclone_path_override(self) -> bool:
        return self._stored_rclone_path is not None

    def override_rclone_path(self, rclone_path: str):
        """Use ``rclone_path`` at runtime without changing the stored value."""
        if self._stored_rclone_path is None:
            self._stored_rclone_path = self.rclone_path
        self.rclone_path = rclone_path

    def update_rclone_path(self, rclone_path: str):
        """Change the stored executable path; an active override keeps precedence."""
        rclone_path = rclone_path.strip()
        if self.has_rclone_path_override:
            self._stored_rclone_path = rclone_path
        else:
            self.rclone_path = rclone_path

    def get_enabled_remotes(self) -> List[RemoteConfig]:
        """Get enabled remotes in configured order."""
        return [remote for remote in self.remotes if remote.enable]

    def to_stored_dict(self) -> Dict[str, Any]:
        """Blob to persist, keyed by the stored aliases."""
        data = self.dict(by_alias=True)
        if self.has_rclone_path_override:
            data["rclonePath"] = self._stored_rclone_path
        return data


EXAMPLE_CONFIG = BridgeConfig(
    rclonePath="/usr/bin/rclone",
    remotes=[
        RemoteConfig(name="onedrive", path="my-vault"),
        RemoteConfig(name="gdrive", path="gdrive:backups/my-vault", enable=False),
    ]
)
