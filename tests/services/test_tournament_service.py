import random
import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tournament_maker.core.errors import (
    DuplicatePlayerError,
    InsufficientPlayersError,
    MatchClosedError,
    NotFoundError,
    TiedScoreError,
    UnbalancedRosterError,
)
from tournament_maker.core.locks import TournamentLockRegistry
from tournament_maker.models import create_all
from tournament_maker.models import match as match_model
from tournament_maker.models.bracket_model import Gender, TeamCreationMode, TournamentStatus
from tournament_maker.services import bracket_service
from tournament_maker.services.player_service import PlayerService
from tournament_maker.services.repository import TournamentRepository
from tournament_maker.services.sql_repository import SqlAlchemyRepository
from tournament_maker.services.tournament_service import TournamentService, calculate_prize_split


def round_matches(tournament, round_number):
    return [m for m in tournament.matches if m.round_number == round_number]


def playable(tournament, round_number):
    return [m for m in round_matches(tournament, round_number) if not m.is_bye]


class TestCreateTournament:

    def test_create_tournament_success(self, tournament_service, make_players):
        players = make_players(8)
        tournament_id = tournament_service.create_tournament(
            "Friday Night", players, TeamCreationMode.MANUAL, Decimal("5")
        )

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.name == "Friday Night"
        assert tournament.status == TournamentStatus.SETUP
        assert tournament.current_round == 1
        assert tournament.pot == Decimal("40")
        assert tournament.winner is None
        assert len(tournament.teams) == 4
        assert len(tournament.matches) == 2
        assert all(t.tournament_id == tournament_id for t in tournament.teams)

    def test_create_with_odd_players_uses_solo_team(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Trio", make_players(3), TeamCreationMode.MANUAL)

        tournament = tournament_service.get_tournament(tournament_id)
        assert len(tournament.teams) == 2
        assert sorted(t.kind for t in tournament.teams) == ["paired", "solo"]
        assert len(tournament.matches) == 1
        assert not tournament.matches[0].is_bye

    def test_rejected_roster_writes_nothing(self, tournament_service, make_players):
        with pytest.raises(InsufficientPlayersError):
            tournament_service.create_tournament("Lonely", make_players(1), TeamCreationMode.MANUAL)
        with pytest.raises(UnbalancedRosterError):
            tournament_service.create_tournament("Lads", make_players(4), TeamCreationMode.BOY_GIRL)
        assert tournament_service.list_tournaments() == []

    def test_repeated_player_writes_nothing(self, tournament_service, make_players):
        a, b = make_players(2)
        with pytest.raises(DuplicatePlayerError):
            tournament_service.create_tournament("Dup", [a, a, b, b], TeamCreationMode.MANUAL, Decimal("10"))
        assert tournament_service.list_tournaments() == []

    def test_get_unknown_tournament(self, tournament_service):
        with pytest.raises(NotFoundError):
            tournament_service.get_tournament("nonexistent_id")


class TestUpdateMatchScore:

    @pytest.fixture
    def final_only(self, tournament_service, make_players):
        players = make_players(4)
        tournament_id = tournament_service.create_tournament("Final", players, TeamCreationMode.MANUAL, Decimal("10"))
        match = tournament_service.get_tournament(tournament_id).matches[0]
        return tournament_id, match, players

    def test_completing_single_match_completes_tournament(self, tournament_service, final_only):
        tournament_id, match, _ = final_only

        updated = tournament_service.update_match_score(match.id, tournament_id, 10, 7, complete=True)
        assert updated.is_complete
        assert updated.winner.id == match.team1.id

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.status == TournamentStatus.COMPLETED
        assert tournament.winner.id == match.team1.id
        assert bracket_service.get_tournament_winner(tournament.matches).id == match.team1.id
        assert bracket_service.get_tournament_runner_up(tournament.matches).id == match.team2.id

    def test_completing_updates_player_records(self, tournament_service, player_service, final_only):
        tournament_id, match, _ = final_only
        tournament_service.update_match_score(match.id, tournament_id, 3, 11, complete=True)

        for player_id in match.team2.member_ids:
            player = player_service.get_player(player_id)
            assert (player.wins, player.losses) == (1, 0)
        for player_id in match.team1.member_ids:
            player = player_service.get_player(player_id)
            assert (player.wins, player.losses) == (0, 1)

    def test_tied_score_is_rejected_without_changes(self, tournament_service, player_service, final_only):
        tournament_id, match, players = final_only

        with pytest.raises(TiedScoreError):
            tournament_service.update_match_score(match.id, tournament_id, 5, 5, complete=True)

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.status == TournamentStatus.SETUP
        stored = tournament.find_match(match.id)
        assert (stored.score1, stored.score2, stored.is_complete) == (0, 0, False)
        for player in players:
            refreshed = player_service.get_player(player.id)
            assert (refreshed.wins, refreshed.losses) == (0, 0)

    def test_saving_progress_activates_without_completing(self, tournament_service, final_only):
        tournament_id, match, _ = final_only
        tournament_service.update_match_score(match.id, tournament_id, 4, 4)

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.status == TournamentStatus.ACTIVE
        stored = tournament.find_match(match.id)
        assert (stored.score1, stored.score2) == (4, 4)
        assert not stored.is_complete
        assert stored.winner is None

    def test_completed_match_cannot_be_rescored(self, tournament_service, final_only):
        tournament_id, match, _ = final_only
        tournament_service.update_match_score(match.id, tournament_id, 10, 7, complete=True)

        with pytest.raises(MatchClosedError):
            tournament_service.update_match_score(match.id, tournament_id, 12, 7, complete=True)

    def test_unknown_match(self, tournament_service, final_only):
        tournament_id, _, _ = final_only
        with pytest.raises(NotFoundError):
            tournament_service.update_match_score("missing", tournament_id, 1, 0, complete=True)

    def test_unknown_tournament(self, tournament_service, final_only):
        _, match, _ = final_only
        with pytest.raises(NotFoundError):
            tournament_service.update_match_score(match.id, "missing", 1, 0, complete=True)


class TestRoundAdvancement:

    def test_four_teams_advance_to_single_final(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Eight", make_players(8), TeamCreationMode.MANUAL)
        first_round = tournament_service.get_tournament(tournament_id).matches
        assert len(first_round) == 2

        tournament_service.update_match_score(first_round[0].id, tournament_id, 6, 2, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.current_round == 1
        assert len(tournament.matches) == 2

        tournament_service.update_match_score(first_round[1].id, tournament_id, 1, 6, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.current_round == 2
        final = round_matches(tournament, 2)
        assert len(final) == 1
        assert {final[0].team1.id, final[0].team2.id} == {first_round[0].team1.id, first_round[1].team2.id}
        assert bracket_service.get_round_display_text(tournament.matches, 2) == "Championship Round"
        assert tournament.status == TournamentStatus.ACTIVE

    def test_three_teams_play_bye_then_final(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Six", make_players(6), TeamCreationMode.MANUAL)
        tournament = tournament_service.get_tournament(tournament_id)
        (game,) = playable(tournament, 1)
        bye = next(m for m in tournament.matches if m.is_bye)

        tournament_service.update_match_score(game.id, tournament_id, 8, 3, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        (final,) = playable(tournament, 2)
        assert {final.team1.id, final.team2.id} == {bye.team1.id, game.team1.id}

        tournament_service.update_match_score(final.id, tournament_id, 2, 9, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.status == TournamentStatus.COMPLETED
        assert tournament.winner.id == final.team2.id

    def test_five_teams_bye_rewards_biggest_win(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Ten", make_players(10), TeamCreationMode.MANUAL)
        tournament = tournament_service.get_tournament(tournament_id)
        blowout, close = playable(tournament, 1)
        first_bye = next(m for m in tournament.matches if m.is_bye)

        tournament_service.update_match_score(blowout.id, tournament_id, 11, 1, complete=True)
        tournament_service.update_match_score(close.id, tournament_id, 11, 10, complete=True)

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.current_round == 2
        second_round = round_matches(tournament, 2)
        second_bye = next(m for m in second_round if m.is_bye)
        assert second_bye.team1.id == blowout.team1.id
        (semi,) = playable(tournament, 2)
        assert {semi.team1.id, semi.team2.id} == {first_bye.team1.id, close.team1.id}

        tournament_service.update_match_score(semi.id, tournament_id, 5, 3, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.current_round == 3
        (final,) = playable(tournament, 3)
        assert {final.team1.id, final.team2.id} == {blowout.team1.id, semi.team1.id}

        tournament_service.update_match_score(final.id, tournament_id, 9, 7, complete=True)
        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.status == TournamentStatus.COMPLETED
        assert tournament.winner.id == final.team1.id
        assert bracket_service.is_tournament_complete(tournament.matches)

    def test_check_is_noop_while_round_incomplete(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Eight", make_players(8), TeamCreationMode.MANUAL)
        tournament_service.check_and_create_next_round(tournament_id)

        tournament = tournament_service.get_tournament(tournament_id)
        assert tournament.current_round == 1
        assert len(tournament.matches) == 2


class TestLifecycle:

    def test_activate_tournament(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Go", make_players(4), TeamCreationMode.MANUAL)
        tournament_service.activate_tournament(tournament_id)
        assert tournament_service.get_tournament(tournament_id).status == TournamentStatus.ACTIVE

        tournament_service.activate_tournament(tournament_id)
        assert tournament_service.get_tournament(tournament_id).status == TournamentStatus.ACTIVE

    def test_fix_bracket_is_noop_when_matches_exist(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament("Ok", make_players(8), TeamCreationMode.MANUAL)

        assert tournament_service.fix_tournament_bracket(tournament_id) == []
        assert tournament_service.fix_tournament_bracket(tournament_id) == []
        assert len(tournament_service.get_tournament(tournament_id).matches) == 2

    def test_fix_bracket_regenerates_missing_matches(self, tournament_service, make_players, db):
        tournament_id = tournament_service.create_tournament("Broken", make_players(10), TeamCreationMode.MANUAL)
        db.query(match_model.Match).filter(match_model.Match.tournament_id == tournament_id).delete()
        db.commit()
        assert tournament_service.get_tournament(tournament_id).matches == []

        created = tournament_service.fix_tournament_bracket(tournament_id)
        assert len(created) == 3
        assert len(tournament_service.get_tournament(tournament_id).matches) == 3
        assert tournament_service.fix_tournament_bracket(tournament_id) == []

    def test_fix_bracket_unknown_tournament(self, tournament_service):
        with pytest.raises(NotFoundError):
            tournament_service.fix_tournament_bracket("missing")

    def test_delete_and_clear(self, tournament_service, make_players):
        players = make_players(4)
        first = tournament_service.create_tournament("One", players, TeamCreationMode.MANUAL)
        tournament_service.create_tournament("Two", players, TeamCreationMode.MANUAL)

        tournament_service.delete_tournament(first)
        with pytest.raises(NotFoundError):
            tournament_service.get_tournament(first)
        with pytest.raises(NotFoundError):
            tournament_service.delete_tournament(first)

        assert tournament_service.clear_all_tournaments() == 1
        assert tournament_service.list_tournaments() == []

    def test_persistence_errors_propagate(self, make_players):
        repository = MagicMock(spec=TournamentRepository)
        repository.transaction.return_value.__exit__.return_value = False
        repository.create_tournament.side_effect = RuntimeError("disk full")
        service = TournamentService(repository)

        with pytest.raises(RuntimeError, match="disk full"):
            service.create_tournament("Doomed", make_players(4), TeamCreationMode.MANUAL)
        repository.create_team.assert_not_called()


class TestPrizeSplit:

    def test_seventy_thirty(self):
        split = calculate_prize_split(Decimal("100"))
        assert split.champion == Decimal("70.00")
        assert split.runner_up == Decimal("30.00")

    def test_rounding_keeps_whole_pot(self):
        split = calculate_prize_split(Decimal("10.05"))
        assert split.champion == Decimal("7.04")
        assert split.champion + split.runner_up == Decimal("10.05")

    def test_tournament_pot_split(self, tournament_service, make_players):
        tournament_id = tournament_service.create_tournament(
            "Cash", make_players(6), TeamCreationMode.MANUAL, Decimal("20")
        )
        split = tournament_service.get_prize_split(tournament_id)
        assert split.champion == Decimal("84.00")
        assert split.runner_up == Decimal("36.00")


class TestLockRegistry:

    def test_same_lock_per_tournament(self):
        locks = TournamentLockRegistry()
        assert locks.lock_for("a") is locks.lock_for("a")
        assert locks.lock_for("a") is not locks.lock_for("b")

    def test_lock_is_reentrant(self):
        locks = TournamentLockRegistry()
        with locks.hold("a"):
            with locks.hold("a"):
                pass

    def test_discard(self):
        locks = TournamentLockRegistry()
        first = locks.lock_for("a")
        locks.discard("a")
        assert locks.lock_for("a") is not first


class TestConcurrentScoring:

    def test_simultaneous_final_scores_create_one_next_round(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'concurrent.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        create_all(bind=engine)
        Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        locks = TournamentLockRegistry()

        setup_db = Session()
        setup_service = TournamentService(SqlAlchemyRepository(setup_db), locks=locks, rng=random.Random(8))
        players = [
            PlayerService(SqlAlchemyRepository(setup_db)).create_player(name=f"C{i}", gender=Gender.MALE)
            for i in range(8)
        ]
        tournament_id = setup_service.create_tournament("Race", players, TeamCreationMode.MANUAL)
        first_round = setup_service.get_tournament(tournament_id).matches
        setup_db.close()

        barrier = threading.Barrier(len(first_round))
        errors = []

        def submit(match_id, seed):
            db = Session()
            try:
                service = TournamentService(SqlAlchemyRepository(db), locks=locks, rng=random.Random(seed))
                barrier.wait()
                service.update_match_score(match_id, tournament_id, 11, 5, complete=True)
            except Exception as exc:
                errors.append(exc)
            finally:
                db.close()

        threads = [
            threading.Thread(target=submit, args=(match.id, seed))
            for seed, match in enumerate(first_round)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        check_db = Session()
        tournament = TournamentService(SqlAlchemyRepository(check_db)).get_tournament(tournament_id)
        check_db.close()
        engine.dispose()

        assert errors == []
        assert len(round_matches(tournament, 2)) == 1
        assert tournament.current_round == 2
        assert all(m.is_complete for m in round_matches(tournament, 1))
