"""
Records returned by the media crawler and the profile extractor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

PROFILE_IMAGE_CONFIDENCE = 0.5

class MediaType(Enum):
    IMAGE = "image"
    VIDEO = "video"

class MediaCategory(Enum):
    FLOORPLAN = "floorplan"

@dataclass(frozen=True)
class MediaAsset:
    """A discovered media resource, created once by the result assembler"""
    id: str
    url: str
    type: MediaType
    category: Optional[MediaCategory] = None
    selected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'url': self.url,
            'type': self.type.value,
            'selected': self.selected
        }
        if self.category is not None:
            data['category'] = self.category.value
        return data

@dataclass(frozen=True)
class ProfileCandidateImage:
    """An <img> on a profile page that may be the agent's avatar"""
    url: str
    name: Optional[str] = None
    confidence: float = PROFILE_IMAGE_CONFIDENCE
    type: str = "image"

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type, 'url': self.url, 'confidence': self.confidence}
        if self.name is not None:
            data['name'] = self.name
        return data

@dataclass
class AgentDetails:
    """Best-effort agent contact details; a missing field means not found"""
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            key: value
            for key, value in (
                ('name', self.name),
                ('email', self.email),
                ('phone', self.phone),
                ('position', self.position),
            )
            if value is not None
        }

@dataclass
class ProfileResult:
    images: List[ProfileCandidateImage] = field(default_factory=list)
    agent_details: AgentDetails = field(default_factory=AgentDetails)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'images': [image.to_dict() for image in self.images],
            'agentDetails': self.agent_details.to_dict()
        }
