"""
Duel Kit.

Gameplay built on top of duelcore:
- Components (derived stats, health)
- Battle (stat scaling, combatants, action resolution, turn scheduling,
  win/lose consequences)
- Save (persisted progress)
- Progression (run flow across matches)
"""
