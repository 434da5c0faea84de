"""
petengine: pet-state simulation engine.

Pure engines (decay, progression, genetics, challenge tracking) live under
`petengine.modules`; async orchestration services compose them around
injected repositories, a clock, and a random source.
"""

__version__ = "1.0.0"
