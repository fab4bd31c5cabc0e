"""Perft and legality tests for the move generator.

Perft reference values: https://www.chessprogramming.org/Perft_Results
The chosen depths contain no promotions, so queen-only promotion does not
change the counts.
"""

import pytest

from kingside.core.board import Board
from kingside.core.enums import Color, MoveFlag, PieceType
from kingside.core.move import Move
from kingside.core.move_generator import MoveGenerator, is_in_check, is_square_attacked
from kingside.core.notation import STARTING_FEN, position_from_fen, resolve_uci_move
from kingside.core.position import Position
from kingside.core.types import A5, B5, C1, C6, D6, E1, E3, E4, E5, E6, E7, E8, G1


def perft(position: Position, depth: int) -> int:
    """Count leaf nodes at *depth* by applying moves to fresh positions."""
    if depth == 0:
        return 1
    moves = MoveGenerator(position).generate_legal_moves()
    if depth == 1:
        return len(moves)
    return sum(perft(position.apply_move(move), depth - 1) for move in moves)


def play(fen: str, *moves: str) -> Position:
    pos = position_from_fen(fen)
    for text in moves:
        move = resolve_uci_move(pos, text)
        assert move is not None, f"{text} is not legal"
        pos = pos.apply_move(move)
    return pos


# ── Starting position ────────────────────────────────────────────────────────


class TestPerftStarting:
    def test_depth_1(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert perft(pos, 1) == 20

    def test_depth_2(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert perft(pos, 2) == 400

    def test_depth_3(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert perft(pos, 3) == 8_902

    @pytest.mark.slow
    def test_depth_4(self) -> None:
        pos = position_from_fen(STARTING_FEN)
        assert perft(pos, 4) == 197_281


# ── Kiwipete (rich in tactics: castling, ep, pins) ───────────────────────────

KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"


class TestPerftKiwipete:
    def test_depth_1(self) -> None:
        pos = position_from_fen(KIWIPETE)
        assert perft(pos, 1) == 48

    def test_depth_2(self) -> None:
        pos = position_from_fen(KIWIPETE)
        assert perft(pos, 2) == 2_039

    @pytest.mark.slow
    def test_depth_3(self) -> None:
        pos = position_from_fen(KIWIPETE)
        assert perft(pos, 3) == 97_862


# ── Position 3: en-passant and discovered-check edge cases ──────────────────

POS3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"


class TestPerftPos3:
    def test_depth_1(self) -> None:
        pos = position_from_fen(POS3)
        assert perft(pos, 1) == 14

    def test_depth_2(self) -> None:
        pos = position_from_fen(POS3)
        assert perft(pos, 2) == 191

    def test_depth_3(self) -> None:
        pos = position_from_fen(POS3)
        assert perft(pos, 3) == 2_812


# ── Move counts after short openings ────────────────────────────────────────


class TestMoveCounts:
    def test_start(self) -> None:
        assert len(MoveGenerator(Position.initial()).generate_legal_moves()) == 20

    def test_after_e4(self) -> None:
        pos = play(STARTING_FEN, "e2e4")
        assert len(MoveGenerator(pos).generate_legal_moves()) == 20

    def test_after_e4_e5(self) -> None:
        pos = play(STARTING_FEN, "e2e4", "e7e5")
        assert len(MoveGenerator(pos).generate_legal_moves()) == 29


# ── Legality filter ──────────────────────────────────────────────────────────


class TestLegality:
    @pytest.mark.parametrize("fen", [STARTING_FEN, KIWIPETE, POS3])
    def test_pseudo_legal_superset_per_piece(self, fen: str) -> None:
        pos = position_from_fen(fen)
        gen = MoveGenerator(pos)
        for sq, _piece in pos.board.pieces(pos.side_to_move):
            pseudo = gen.pseudo_legal_moves_from(sq)
            legal = gen.legal_moves_from(sq)
            assert len(pseudo) >= len(legal)
            assert set(legal) <= set(pseudo)

    @pytest.mark.parametrize("fen", [STARTING_FEN, KIWIPETE, POS3])
    def test_no_legal_move_leaves_king_in_check(self, fen: str) -> None:
        pos = position_from_fen(fen)
        mover = pos.side_to_move
        for move in MoveGenerator(pos).generate_legal_moves():
            assert not is_in_check(pos.apply_move(move).board, mover), str(move)

    def test_only_side_to_move_has_moves(self) -> None:
        gen = MoveGenerator(Position.initial())
        assert gen.legal_moves_from(E7) == []
        assert gen.pseudo_legal_moves_from(E7) != []

    def test_empty_square_has_no_moves(self) -> None:
        gen = MoveGenerator(Position.initial())
        assert gen.legal_moves_from(E4) == []
        assert gen.pseudo_legal_moves_from(E4) == []

    def test_is_legal(self) -> None:
        gen = MoveGenerator(Position.initial())
        assert gen.is_legal(Move((6, 4), E4, MoveFlag.DOUBLE_PAWN))
        assert not gen.is_legal(Move((6, 4), (3, 4)))

    def test_pinned_piece_cannot_leave_line(self) -> None:
        # White knight e2 pinned by the rook on e8.
        pos = position_from_fen("4r1k1/8/8/8/8/8/4N3/4K3 w - - 0 1")
        assert MoveGenerator(pos).legal_moves_from((6, 4)) == []

    def test_has_legal_moves_matches_generation(self) -> None:
        pos = position_from_fen(KIWIPETE)
        gen = MoveGenerator(pos)
        assert gen.has_legal_moves() == bool(gen.generate_legal_moves())


# ── Special moves ────────────────────────────────────────────────────────────


class TestCastling:
    def test_both_sides_available(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E1)
        flags = {m.flag for m in moves}
        assert MoveFlag.CASTLE_KINGSIDE in flags
        assert MoveFlag.CASTLE_QUEENSIDE in flags
        assert Move(E1, G1, MoveFlag.CASTLE_KINGSIDE) in moves
        assert Move(E1, C1, MoveFlag.CASTLE_QUEENSIDE) in moves

    def test_no_castling_through_attacked_square(self) -> None:
        # Black rook on f8 covers f1.
        pos = position_from_fen("4kr2/8/8/8/8/8/8/R3K2R w KQ - 0 1")
        flags = {m.flag for m in MoveGenerator(pos).legal_moves_from(E1)}
        assert MoveFlag.CASTLE_KINGSIDE not in flags
        assert MoveFlag.CASTLE_QUEENSIDE in flags

    def test_no_castling_out_of_check(self) -> None:
        pos = position_from_fen("4r1k1/8/8/8/8/8/8/R3K2R w KQ - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E1)
        assert not any(m.is_castle for m in moves)

    def test_no_castling_without_rights(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E1)
        assert not any(m.is_castle for m in moves)

    def test_no_castling_when_path_blocked(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/RN2K1NR w KQkq - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E1)
        assert not any(m.is_castle for m in moves)

    def test_no_castling_without_rook(self) -> None:
        pos = position_from_fen("r3k2r/8/8/8/8/8/8/4K3 w KQkq - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E1)
        assert not any(m.is_castle for m in moves)


class TestEnPassant:
    def test_capture_generated(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E5)
        assert Move(E5, D6, MoveFlag.EN_PASSANT, capture=True) in moves

    def test_no_capture_without_target(self) -> None:
        pos = position_from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E5)
        assert not any(m.flag == MoveFlag.EN_PASSANT for m in moves)

    def test_capture_exposing_king_is_illegal(self) -> None:
        # Taking c6 e.p. would clear rank 5 between the rook and the king.
        pos = position_from_fen("8/8/8/KPp4r/8/8/8/4k3 w - c6 0 1")
        moves = MoveGenerator(pos).legal_moves_from(B5)
        assert Move(B5, C6, MoveFlag.EN_PASSANT, capture=True) not in moves
        assert moves == [Move(B5, (2, 1))]
        assert MoveGenerator(pos).legal_moves_from(A5) != []


class TestPromotion:
    def test_single_queen_promotion(self) -> None:
        pos = position_from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E7)
        assert moves == [Move(E7, E8, promotion=PieceType.QUEEN)]
        assert moves[0].uci == "e7e8q"

    def test_capture_promotion(self) -> None:
        pos = position_from_fen("k2r4/4P3/8/8/8/8/8/4K3 w - - 0 1")
        moves = MoveGenerator(pos).legal_moves_from(E7)
        assert Move(E7, (0, 3), capture=True, promotion=PieceType.QUEEN) in moves
        assert all(m.promotion == PieceType.QUEEN for m in moves)


# ── Attack oracle ────────────────────────────────────────────────────────────


class TestAttacks:
    def test_pawn_attacks(self) -> None:
        board = Board.initial()
        assert is_square_attacked(board, E3, Color.WHITE)
        assert is_square_attacked(board, E6, Color.BLACK)
        assert not is_square_attacked(board, E4, Color.BLACK)

    def test_slider_blocked(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/4P3/4R1K1 w - - 0 1")
        assert not is_square_attacked(pos.board, E4, Color.WHITE)
        assert is_square_attacked(pos.board, (7, 3), Color.WHITE)

    def test_missing_king_not_in_check(self) -> None:
        assert not is_in_check(Board(), Color.WHITE)

    def test_generator_delegates(self) -> None:
        pos = position_from_fen("4k3/8/8/8/8/8/8/4RK2 b - - 0 1")
        gen = MoveGenerator(pos)
        assert gen.is_in_check(Color.BLACK)
        assert gen.is_square_attacked(E8, Color.WHITE)
