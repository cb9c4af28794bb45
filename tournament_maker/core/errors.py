"""
Error taxonomy for the tournament engine.

Validation failures are raised before any state is written. Storage failures
surface as PersistenceError and are never retried by the services.
"""


class TournamentMakerError(Exception):
    """Base class for every error raised by tournament_maker."""


class ValidationFailure(TournamentMakerError):
    """A request was refused before any mutation took place."""


class InsufficientPlayersError(ValidationFailure):
    def __init__(self, count: int, required: int = 2):
        self.count = count
        self.required = required
        super().__init__(f"Need at least {required} players to create teams, got {count}.")


class InsufficientTeamsError(ValidationFailure):
    def __init__(self, count: int, required: int = 2):
        self.count = count
        self.required = required
        super().__init__(f"Need at least {required} teams to create a bracket, got {count}.")


class UnbalancedRosterError(ValidationFailure):
    def __init__(self, male_count: int, female_count: int):
        self.male_count = male_count
        self.female_count = female_count
        super().__init__(
            "Boy/girl pairing requires at least one male and one female player "
            f"(got {male_count} male, {female_count} female)."
        )


class DuplicatePlayerError(ValidationFailure):
    def __init__(self, player_ids):
        self.player_ids = sorted(player_ids)
        super().__init__(f"Each player can join only once; repeated: {', '.join(self.player_ids)}.")


class InvalidProfilePictureError(ValidationFailure):
    def __init__(self, source_path: str, reason: str):
        self.source_path = source_path
        super().__init__(f"Cannot use {source_path} as a profile picture: {reason}")


class TiedScoreError(ValidationFailure):
    def __init__(self, score: int):
        self.score = score
        super().__init__(f"Cannot complete a match tied at {score}-{score}. A winner must be determined.")


class MatchClosedError(ValidationFailure):
    def __init__(self, match_id: str, reason: str):
        self.match_id = match_id
        self.reason = reason
        super().__init__(f"Match {match_id} cannot be scored: {reason}.")


class NotFoundError(TournamentMakerError):
    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} with ID {entity_id} not found.")


class PersistenceError(TournamentMakerError):
    """The storage collaborator failed. Wraps the underlying driver error."""
