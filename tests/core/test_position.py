"""Tests for Position.apply_move and the Zobrist key."""

import pytest

from kingside.core.enums import CastlingRights, Color, MoveFlag, PieceType
from kingside.core.move import Move
from kingside.core.move_generator import MoveGenerator
from kingside.core.notation import STARTING_FEN, position_from_fen, resolve_uci_move
from kingside.core.piece import Piece
from kingside.core.position import Position
from kingside.core.types import A1, D5, D7, E1, E2, E4, H1, H8, parse_square

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


def play(pos: Position, *moves: str) -> Position:
    for text in moves:
        move = resolve_uci_move(pos, text)
        assert move is not None, f"{text} is not legal"
        pos = pos.apply_move(move)
    return pos


def rehash(pos: Position) -> int:
    return Position(
        pos.board, pos.side_to_move, pos.castling, pos.en_passant
    ).zobrist_hash


class TestApplyMove:
    def test_side_switches(self) -> None:
        pos = Position.initial().apply_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert pos.side_to_move == Color.BLACK

    def test_source_is_untouched(self) -> None:
        start = Position.initial()
        start.apply_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert start.side_to_move == Color.WHITE
        assert start.board[E2] == Piece(Color.WHITE, PieceType.PAWN)
        assert start.board[E4] is None

    def test_en_passant_set(self) -> None:
        pos = Position.initial().apply_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == parse_square("e3")

    def test_en_passant_replaced_then_cleared(self) -> None:
        pos = Position.initial().apply_move(Move(E2, E4, MoveFlag.DOUBLE_PAWN))
        pos = pos.apply_move(Move(D7, D5, MoveFlag.DOUBLE_PAWN))
        assert pos.en_passant == parse_square("d6")
        pos = play(pos, "g1f3")
        assert pos.en_passant is None

    def test_capture(self) -> None:
        fen = "rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2"
        pos = position_from_fen(fen).apply_move(Move(E4, D5, capture=True))
        assert pos.board[D5] == Piece(Color.WHITE, PieceType.PAWN)
        assert pos.board[E4] is None

    def test_empty_origin_raises(self) -> None:
        with pytest.raises(ValueError):
            Position.initial().apply_move(Move(E4, D5))


class TestClocks:
    def test_halfmove_increments_on_quiet_move(self) -> None:
        pos = play(Position.initial(), "g1f3")
        assert pos.halfmove_clock == 1

    def test_halfmove_resets_on_pawn_move(self) -> None:
        pos = play(Position.initial(), "g1f3", "e7e5")
        assert pos.halfmove_clock == 0

    def test_halfmove_resets_on_capture(self) -> None:
        pos = play(Position.initial(), "g1f3", "e7e5", "b1c3", "b8c6", "f3e5")
        assert pos.halfmove_clock == 0

    def test_fullmove_after_black(self) -> None:
        pos = play(Position.initial(), "e2e4")
        assert pos.fullmove_number == 1
        pos = play(pos, "e7e5")
        assert pos.fullmove_number == 2


class TestCastlingRights:
    def test_king_move_clears_both(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "e1f1")
        assert not pos.has_castling(CastlingRights.WHITE_BOTH)
        assert pos.has_castling(CastlingRights.BLACK_KINGSIDE)
        assert pos.has_castling(CastlingRights.BLACK_QUEENSIDE)

    def test_castling_clears_both(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "e1g1")
        assert pos.castling == CastlingRights.BLACK_BOTH
        assert pos.board[(7, 5)] == Piece(Color.WHITE, PieceType.ROOK)

    def test_rook_move_clears_one(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "h1h2")
        assert not pos.has_castling(CastlingRights.WHITE_KINGSIDE)
        assert pos.has_castling(CastlingRights.WHITE_QUEENSIDE)

    def test_capture_on_corner_clears_victim_right(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "h1h8")
        assert not pos.has_castling(CastlingRights.BLACK_KINGSIDE)
        assert not pos.has_castling(CastlingRights.WHITE_KINGSIDE)
        assert pos.has_castling(CastlingRights.BLACK_QUEENSIDE)
        assert pos.board[H8] == Piece(Color.WHITE, PieceType.ROOK)

    def test_rights_never_return(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        pos = play(pos, "a1a2", "a8a7", "a2a1", "a7a8")
        assert pos.castling == CastlingRights.WHITE_KINGSIDE | CastlingRights.BLACK_KINGSIDE
        assert pos.board[A1] == Piece(Color.WHITE, PieceType.ROOK)
        assert pos.board[H1] == Piece(Color.WHITE, PieceType.ROOK)
        assert pos.board[E1] == Piece(Color.WHITE, PieceType.KING)


class TestZobrist:
    def test_initial_matches_fen(self) -> None:
        assert Position.initial().zobrist_hash == position_from_fen(STARTING_FEN).zobrist_hash

    def test_incremental_matches_full_recompute(self) -> None:
        pos = position_from_fen(KIWIPETE)
        for move in MoveGenerator(pos).generate_legal_moves():
            nxt = pos.apply_move(move)
            assert nxt.zobrist_hash == rehash(nxt), f"Mismatch after {move}"

    def test_en_passant_and_promotion_recompute(self) -> None:
        pos = position_from_fen("4k3/1P6/8/3pP3/8/8/8/4K3 w - d6 0 1")
        for move in MoveGenerator(pos).generate_legal_moves():
            nxt = pos.apply_move(move)
            assert nxt.zobrist_hash == rehash(nxt), f"Mismatch after {move}"

    def test_transposition_same_key(self) -> None:
        a = play(Position.initial(), "g1f3", "g8f6", "b1c3", "b8c6")
        b = play(Position.initial(), "b1c3", "b8c6", "g1f3", "g8f6")
        assert a.zobrist_hash == b.zobrist_hash
        assert hash(a) == hash(b)

    def test_knight_shuffle_returns_to_start_key(self) -> None:
        pos = play(Position.initial(), "g1f3", "g8f6", "f3g1", "f6g8")
        assert pos.zobrist_hash == Position.initial().zobrist_hash
        assert pos.halfmove_clock == 4

    def test_side_to_move_changes_key(self) -> None:
        white = position_from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
        black = position_from_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
        assert white.zobrist_hash != black.zobrist_hash
