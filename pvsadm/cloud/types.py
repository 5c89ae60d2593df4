"""Shared data types for IBM Cloud API responses."""

from dataclasses import dataclass, field


@dataclass
class ResourceInstance:
    """A Resource Controller service instance (PowerVS workspace or COS instance)."""

    guid: str
    name: str
    crn: str = ""
    region_id: str = ""

    @classmethod
    def from_api(cls, data):
        return cls(
            guid=data.get("guid", ""),
            name=data.get("name", ""),
            crn=data.get("crn", ""),
            region_id=data.get("region_id", ""),
        )


@dataclass
class ResourceKey:
    """A service credential attached to a resource instance."""

    id: str
    name: str
    credentials: dict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data):
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            credentials=data.get("credentials") or {},
        )


@dataclass(frozen=True)
class HMACCredentials:
    access_key: str
    secret_key: str


@dataclass
class StorageTier:
    name: str
    state: str = ""


@dataclass
class JobReference:
    id: str


@dataclass
class Job:
    """An asynchronous PowerVS job and its current status."""

    id: str
    state: str
    message: str = ""

    @classmethod
    def from_api(cls, data):
        status = data.get("status") or {}
        return cls(
            id=data.get("id", ""),
            state=status.get("state", ""),
            message=status.get("message", ""),
        )


@dataclass
class Image:
    image_id: str
    name: str
    state: str = ""

    @classmethod
    def from_api(cls, data):
        return cls(
            image_id=data.get("imageID", ""),
            name=data.get("name", ""),
            state=data.get("state", ""),
        )
