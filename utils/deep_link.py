"""Liens profonds ouverts depuis le widget (lifeflow://...)"""

from typing import Optional
from urllib.parse import urlparse

from config.settings import DEEP_LINK_SCHEME

# Hôte du lien -> écran à ouvrir
DEEP_LINK_TARGETS = {
    'gym': "gym",
}


def parse_deep_link(url: str) -> Optional[str]:
    """
    Args:
        url: Lien reçu (ex: "lifeflow://gym")

    Returns:
        Écran cible, ou None si le lien est inconnu
    """
    parsed = urlparse(url)
    if parsed.scheme != DEEP_LINK_SCHEME:
        return None
    return DEEP_LINK_TARGETS.get(parsed.netloc.lower())
