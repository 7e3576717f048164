"""
Catalog component.

Responsibilities:
- Hold filter, sort, pagination, leaderboard and rating-edit state in one struct.
- Apply every change through a single reducer.
- Debounce the text filters and refetch when the effective filters change.
- Submit rating edits and refresh the list and leaderboard afterwards.
"""
