"""
SteamCircle engine package.

Layered the same way throughout:

  circle/models.py   : transient result types (dataclasses), created per request.
  circle/errors.py   : the small exception hierarchy raised at request level.
  circle/fanout.py   : bounded thread-pool fan-out shared by every service.
  circle/services/   : the aggregation logic: account stats, achievements,
                      friend popularity, overlaps, leaderboard and the
                      combined friends view.

Services receive a catalog client (normally ``steam_client.SteamAPIClient``)
in ``__init__`` and never touch HTTP themselves; every catalog call returns a
``FetchResult`` that the service inspects to apply its own failure policy.
"""
