import logging
import unicodedata
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from talentdesk.models.talents import Talent
from talentdesk.models.partners import PartnerTarifOverride

logger = logging.getLogger(__name__)


class ContentType(str, Enum):
    STORY = "STORY"
    STORY_CONCOURS = "STORY_CONCOURS"
    POST = "POST"
    POST_CONCOURS = "POST_CONCOURS"
    POST_COMMUN = "POST_COMMUN"
    REEL = "REEL"
    TIKTOK_VIDEO = "TIKTOK_VIDEO"
    YOUTUBE_VIDEO = "YOUTUBE_VIDEO"
    YOUTUBE_SHORT = "YOUTUBE_SHORT"
    EVENT = "EVENT"
    SHOOTING = "SHOOTING"
    AMBASSADEUR = "AMBASSADEUR"

    @property
    def label(self) -> str:
        return CONTENT_TYPE_LABELS[self]

    @property
    def tarif_key(self) -> str:
        return f"tarif_{self.value.lower()}"


CONTENT_TYPE_LABELS = {
    ContentType.STORY: "Story",
    ContentType.STORY_CONCOURS: "Story Concours",
    ContentType.POST: "Post",
    ContentType.POST_CONCOURS: "Post Concours",
    ContentType.POST_COMMUN: "Post Commun",
    ContentType.REEL: "Reel",
    ContentType.TIKTOK_VIDEO: "Vidéo TikTok",
    ContentType.YOUTUBE_VIDEO: "Vidéo YouTube",
    ContentType.YOUTUBE_SHORT: "YouTube Short",
    ContentType.EVENT: "Event",
    ContentType.SHOOTING: "Shooting",
    ContentType.AMBASSADEUR: "Ambassadeur",
}

TARIF_KEYS = [content_type.tarif_key for content_type in ContentType]


def normalize_label(label: Optional[str]) -> str:
    """
    Case-fold, strip diacritics and drop whitespace, '_' and '-'

    "Vidéo TikTok" -> "videotiktok", "STORY_CONCOURS" -> "storyconcours"
    """
    if not label:
        return ""
    decomposed = unicodedata.normalize("NFD", label.strip().casefold())
    without_accents = "".join(c for c in decomposed if not unicodedata.combining(c))
    return "".join(c for c in without_accents if not c.isspace() and c not in "_-")


# Substring candidates, longest normalized form first so that
# "Post Concours" is tried before "Post"
_SUBSTRING_CANDIDATES = sorted(
    (
        (normalize_label(form), content_type)
        for content_type in ContentType
        for form in {content_type.value, content_type.label}
    ),
    key=lambda candidate: (-len(candidate[0]), list(ContentType).index(candidate[1])),
)


def resolve_content_type(label: Optional[str]) -> Optional[ContentType]:
    """
    Map a free-text content label to a ContentType, None when unmatched

    Precedence:
        1. exact enum value or exact label ("STORY", "Story")
        2. normalized equality ("story", "video tiktok")
        3. substring containment either way, longest candidate first
    """
    if label is None:
        return None
    raw = label.strip()
    if not raw:
        return None

    # 1. Exact
    for content_type in ContentType:
        if raw == content_type.value or raw == content_type.label:
            return content_type

    # 2. Normalized exact
    normalized = normalize_label(raw)
    if not normalized:
        return None
    for candidate, content_type in _SUBSTRING_CANDIDATES:
        if normalized == candidate:
            return content_type

    # 3. Substring
    for candidate, content_type in _SUBSTRING_CANDIDATES:
        if candidate in normalized or normalized in candidate:
            return content_type

    return None


def _tarif_value(source: Any, key: str) -> Optional[Decimal]:
    if source is None:
        return None
    if isinstance(source, dict):
        value = source.get(key)
    else:
        value = getattr(source, key, None)
    if value is None:
        return None
    return Decimal(str(value))


def resolve_tarif_with_source(
    content_type: ContentType,
    talent_tarifs: Any,
    override: Any = None
) -> Tuple[Optional[Decimal], Optional[str]]:
    """
    Return (unit price, origin) where origin is "partner", "talent" or None

    Args:
        content_type: Resolved content type
        talent_tarifs: Talent rate card (TalentTarifs row or dict keyed by tarif_*)
        override: Optional PartnerTarifOverride row or dict, null fields fall back
    """
    key = content_type.tarif_key
    override_value = _tarif_value(override, key)
    if override_value is not None:
        return override_value, "partner"
    default_value = _tarif_value(talent_tarifs, key)
    if default_value is not None:
        return default_value, "talent"
    return None, None


def resolve_tarif(content_type: ContentType, talent_tarifs: Any, override: Any = None) -> Optional[Decimal]:
    """Effective unit price for a content type, None means manual entry is required"""
    return resolve_tarif_with_source(content_type, talent_tarifs, override)[0]


def get_tarif_suggere(
    db: Session,
    talent_id: int,
    label: str,
    partner_id: Optional[int] = None
) -> Dict[str, Any]:
    """
    Suggested unit price for a talent and a content label

    Args:
        db: Database session
        talent_id: Talent whose rate card is used
        label: Free-text content type ("Story", "story concours", "REEL"...)
        partner_id: Optional partner whose negotiated rates take precedence

    Returns:
        Dictionary with type_contenu, prix_unitaire and source
    """
    talent = db.query(Talent).filter(Talent.id == talent_id).first()
    if not talent:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Talent non trouvé"
        )

    content_type = resolve_content_type(label)
    if content_type is None:
        logger.info(f"Type de contenu non reconnu: {label!r}")
        return {"type_contenu": None, "prix_unitaire": None, "source": None}

    override = None
    if partner_id is not None:
        override = db.query(PartnerTarifOverride).filter(
            PartnerTarifOverride.partner_id == partner_id,
            PartnerTarifOverride.talent_id == talent_id
        ).first()

    prix, origine = resolve_tarif_with_source(content_type, talent.tarifs, override)
    return {
        "type_contenu": content_type.value,
        "prix_unitaire": prix,
        "source": origine
    }
