"""
Trivia Grid: 3×3 Trivia Grid Question Generator

Builds "immaculate grid" style puzzles from a pool of football players: each
row and column header is a team, role or nationality, and each cell asks for
a player matching both.

Main Components:
- core: Grid data model, validator interface and exceptions
- data: Entity pool structures, loading and game persistence
- generate: Feature extraction, combination pre-computation, grid assembly
- validate: Minimum-answer validation gate

Quick Start:
    from trivia_grid.data import EntityLoader
    from trivia_grid.generate import CombinationPrecomputer, GridAssembler

    entities = EntityLoader().load_json("players.json")
    index = CombinationPrecomputer().build_index(entities)
    grid = GridAssembler(index).assemble()
"""

__version__ = "0.1.0"
