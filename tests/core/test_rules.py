"""Tests for Rules: check, checkmate, stalemate, game status."""

from kingside.core.enums import GameResult, GameStatus
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import STARTING_FEN, position_from_fen, resolve_uci_move
from kingside.core.position import Position
from kingside.core.rules import Rules

FOOLS_MATE = "rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"


def play(fen: str, *moves: str) -> Position:
    pos = position_from_fen(fen)
    for text in moves:
        move = resolve_uci_move(pos, text)
        assert move is not None, f"{text} is not legal"
        pos = pos.apply_move(move)
    return pos


class TestCheck:
    def test_starting_not_in_check(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert not Rules.is_in_check(pos)
        assert Rules.game_status(pos) == GameStatus.IN_PROGRESS

    def test_fools_mate_in_check(self) -> None:
        # After 1.f3 e5 2.g4 Qh4# - white is in check
        pos = position_from_fen(FOOLS_MATE)
        assert Rules.is_in_check(pos)

    def test_check_status(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
        assert Rules.game_status(pos) == GameStatus.CHECK
        assert Rules.game_result(pos) == GameResult.IN_PROGRESS


class TestCheckmate:
    def test_fools_mate_by_moves(self) -> None:
        pos = play(STARTING_FEN, "f2f3", "e7e5", "g2g4", "d8h4")
        assert Rules.is_checkmate(pos)
        assert Rules.legal_moves(pos) == []
        assert Rules.game_status(pos) == GameStatus.CHECKMATE
        assert Rules.game_result(pos) == GameResult.BLACK_WINS

    def test_fools_mate_fen(self) -> None:
        pos = position_from_fen(FOOLS_MATE)
        assert Rules.is_checkmate(pos)
        assert Rules.game_result(pos) == GameResult.BLACK_WINS

    def test_back_rank_mate(self) -> None:
        # R on a8 checks black king d8; white king d6 covers all escapes
        pos = position_from_fen("R2k4/8/3K4/8/8/8/8/8 b - - 0 1")
        assert Rules.is_checkmate(pos)
        assert Rules.game_result(pos) == GameResult.WHITE_WINS

    def test_not_checkmate_when_can_escape(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/r3K3 w - - 0 1")
        assert not Rules.is_checkmate(pos)


class TestStalemate:
    def test_king_trapped(self) -> None:
        # Black king on h8, white K on f6, white Q on g6
        pos = position_from_fen("7k/8/5KQ1/8/8/8/8/8 b - - 0 1")
        assert Rules.is_stalemate(pos)
        assert not MoveGenerator(pos).has_legal_moves()
        assert Rules.game_status(pos) == GameStatus.STALEMATE
        assert Rules.game_result(pos) == GameResult.DRAW

    def test_not_stalemate_when_has_moves(self) -> None:
        pos = position_from_fen("7k/8/5K2/8/8/8/8/8 b - - 0 1")
        assert not Rules.is_stalemate(pos)

    def test_bare_kings_are_not_stalemate(self) -> None:
        pos = position_from_fen("8/8/4k3/8/8/4K3/8/8 w - - 0 1")
        assert not Rules.is_stalemate(pos)
        assert Rules.game_result(pos) == GameResult.IN_PROGRESS

    def test_checkmate_is_not_stalemate(self) -> None:
        assert not Rules.is_stalemate(position_from_fen(FOOLS_MATE))
