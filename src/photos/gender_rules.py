"""
Gender classification rules for the local catalog.

The rules document is optional JSON kept next to the catalog:

    {
        "items": {"street_look_03.jpg": "unisex", "suit_01.jpg": "male"},
        "audiences": {
            "male":   {"include": ["^mens", "suit"], "exclude": ["womens", "dress"]},
            "female": {"include": ["womens"],        "exclude": ["^mens", "_mens", "_male"]}
        }
    }

Patterns match anywhere in the lower-cased filename; a leading ``^`` anchors
the pattern to the start of the name ("^mens" matches "menswear_01.jpg" but
not "womenswear_01.jpg").

Precedence, most specific first:
    1. explicit per-item tag (own audience or "unisex" accepts, the other rejects)
    2. exclude pattern  -> reject
    3. include pattern  -> accept
    4. default          -> accept

A missing, unreadable or invalid document means "accept everything".
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from core.logging import get_logger
from photos.models import Audience

logger = get_logger(__name__)

UNISEX = "unisex"


class AudienceRulesDocument(BaseModel):
    """Patterns for one audience as written in the rules document."""
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)


class GenderRulesDocument(BaseModel):
    """Top-level shape of the rules document."""
    items: Dict[str, str] = Field(default_factory=dict)
    audiences: Dict[str, AudienceRulesDocument] = Field(default_factory=dict)


def pattern_matches(pattern: str, name: str) -> bool:
    if pattern.startswith("^"):
        return name.startswith(pattern[1:])
    return pattern in name


@dataclass(frozen=True)
class AudiencePatterns:
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GenderRules:
    """Read-only classification rules."""

    item_tags: Dict[str, str] = field(default_factory=dict)
    patterns: Dict[Audience, AudiencePatterns] = field(default_factory=dict)
    loaded_from: Optional[Path] = None

    @classmethod
    def accept_all(cls) -> "GenderRules":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.item_tags and not self.patterns

    def accepts(self, filename: str, audience: Audience) -> bool:
        name = filename.lower()

        tag = self.item_tags.get(name)
        if tag is not None:
            return tag == UNISEX or tag == audience.value

        patterns = self.patterns.get(audience)
        if patterns is None:
            return True
        if any(pattern_matches(p, name) for p in patterns.exclude):
            return False
        if any(pattern_matches(p, name) for p in patterns.include):
            return True
        return True

    @classmethod
    def from_dict(cls, data, loaded_from: Optional[Path] = None) -> "GenderRules":
        """
        Build rules from a decoded document.

        Raises ValidationError when the document does not have the expected
        shape. Unknown tags and audiences are skipped with a warning.
        """
        document = GenderRulesDocument.model_validate(data)

        item_tags: Dict[str, str] = {}
        for filename, tag in document.items.items():
            tag = tag.strip().lower()
            if tag != UNISEX:
                try:
                    tag = Audience(tag).value
                except ValueError:
                    logger.warning("Ignoring unknown gender tag", filename=filename, tag=tag)
                    continue
            item_tags[filename.lower()] = tag

        patterns: Dict[Audience, AudiencePatterns] = {}
        for key, entry in document.audiences.items():
            try:
                audience = Audience(key.lower())
            except ValueError:
                logger.warning("Ignoring rules for unknown audience", audience=key)
                continue
            patterns[audience] = AudiencePatterns(
                include=_lower_patterns(entry.include),
                exclude=_lower_patterns(entry.exclude),
            )

        return cls(item_tags=item_tags, patterns=patterns, loaded_from=loaded_from)


def _lower_patterns(values: List[str]) -> Tuple[str, ...]:
    return tuple(v.strip().lower() for v in values if v.strip())


def load_gender_rules(path: Optional[Path]) -> GenderRules:
    """
    Load rules from ``path``, degrading to accept-everything on any problem.
    """
    if path is None or not path.exists():
        logger.info("No gender rules document, accepting every catalog file", path=str(path))
        return GenderRules.accept_all()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read gender rules, accepting every catalog file", path=str(path), error=str(e))
        return GenderRules.accept_all()

    try:
        rules = GenderRules.from_dict(data, loaded_from=path)
    except ValidationError as e:
        logger.warning("Gender rules document is invalid, ignoring it", path=str(path), error=str(e))
        return GenderRules.accept_all()

    logger.info(
        "Loaded gender rules",
        path=str(path),
        tagged_items=len(rules.item_tags),
        audiences=[a.value for a in rules.patterns],
    )
    return rules
