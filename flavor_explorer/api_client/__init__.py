"""
Remote food API client.

Responsibilities:
- Hold the base URL and timeout of the remote food service.
- Build the list query from filter, sort and pagination values.
- Perform the three remote calls (list page, leaderboard, rating update).
- Turn transport, status and decode errors into typed failures instead of raising.
"""
