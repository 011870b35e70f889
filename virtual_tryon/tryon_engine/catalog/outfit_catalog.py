# virtual_tryon/tryon_engine/catalog/outfit_catalog.py
import yaml
import logging
from typing import Iterable, List, Optional
from ..common.models import Outfit

logger = logging.getLogger(__name__)

class OutfitCatalog:
    """In-memory, read-only store of the outfits offered for try-on.

    Built once per process and handed to whatever needs outfits; there is no
    persistence and no mutation API.
    """

    def __init__(self, outfits: Iterable[Outfit]):
        self._outfits = {}
        for outfit in outfits:
            if outfit.id in self._outfits:
                raise ValueError(f"Duplicate outfit id: {outfit.id}")
            self._outfits[outfit.id] = outfit

    @classmethod
    def from_yaml(cls, path: str) -> "OutfitCatalog":
        with open(path, 'r') as f:
            document = yaml.safe_load(f) or {}
        outfits = [Outfit(**entry) for entry in document.get('outfits', [])]
        logger.info("Loaded %d outfits from %s", len(outfits), path)
        return cls(outfits)

    def list(self) -> List[Outfit]:
        return list(self._outfits.values())

    def get(self, outfit_id: str) -> Optional[Outfit]:
        return self._outfits.get(outfit_id)

    def __len__(self) -> int:
        return len(self._outfits)
