"""
Request and response records for the GitHub endpoints repostrap calls.

to_dict() gives the JSON request body, from_dict() decodes a response or
a previously serialized body.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Repository:
    """A repository to create in an organization."""

    name: str
    visibility: str  # "private" or "public"
    org: str
    delete_branch_on_merge: bool = True

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "visibility": self.visibility,
            "delete_branch_on_merge": self.delete_branch_on_merge,
            "org": self.org,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Repository":
        return cls(
            name=data.get("name", ""),
            visibility=data.get("visibility", "private"),
            org=data.get("org", ""),
            delete_branch_on_merge=data.get("delete_branch_on_merge", True),
        )


@dataclass
class CreatedRepository:
    """Response of the create-repository endpoint."""

    name: str
    html_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "CreatedRepository":
        return cls(name=data.get("name", ""), html_url=data.get("html_url", ""))


@dataclass
class DeployKey:
    """A deploy key to register on a repository."""

    key: str
    title: str
    repository_name: str
    read_only: bool = False

    def to_dict(self) -> dict:
        # repository_name only addresses the endpoint
        return {
            "key": self.key,
            "title": self.title,
            "read_only": self.read_only,
        }

    @classmethod
    def from_dict(cls, data: dict, repository_name: str = "") -> "DeployKey":
        return cls(
            key=data.get("key", ""),
            title=data.get("title", ""),
            repository_name=repository_name,
            read_only=data.get("read_only", False),
        )


@dataclass
class DeployKeyInfo:
    """Response of the deploy-key endpoint."""

    key: str
    title: str
    verified: bool = False
    read_only: bool = False
    added_by: Optional[str] = None
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "DeployKeyInfo":
        return cls(
            key=data.get("key", ""),
            title=data.get("title", ""),
            verified=data.get("verified", False),
            read_only=data.get("read_only", False),
            added_by=data.get("added_by"),
            enabled=data.get("enabled", True),
        )


@dataclass
class RepositoryPublicKey:
    """The repository's Actions secret encryption key."""

    key_id: str
    key: str  # base64, 32 bytes once decoded

    @classmethod
    def from_dict(cls, data: dict) -> "RepositoryPublicKey":
        return cls(key_id=str(data.get("key_id", "")), key=data.get("key", ""))


@dataclass
class RepositorySecret:
    """A sealed secret ready for upload."""

    repository_name: str
    secret_name: str
    encrypted_value: str
    key_id: str

    def to_dict(self) -> dict:
        return {
            "encrypted_value": self.encrypted_value,
            "key_id": self.key_id,
        }

    @classmethod
    def from_dict(
        cls, data: dict, repository_name: str = "", secret_name: str = ""
    ) -> "RepositorySecret":
        return cls(
            repository_name=repository_name,
            secret_name=secret_name,
            encrypted_value=data.get("encrypted_value", ""),
            key_id=str(data.get("key_id", "")),
        )
