from petengine.modules.breeding.repository import BreedingRepository, InMemoryBreedingRepository
from petengine.modules.breeding.service import BreedingService

__all__ = ["BreedingRepository", "InMemoryBreedingRepository", "BreedingService"]
