from petengine.modules.pets.repository import InMemoryPetRepository, PetRepository
from petengine.modules.pets.service import PetService

__all__ = ["PetRepository", "InMemoryPetRepository", "PetService"]
