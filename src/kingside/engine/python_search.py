"""Pure-Python chess engine search (minimax + alpha-beta)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter, sleep

from kingside.core.enums import Color, MoveFlag, PieceType
from kingside.core.move import Move
from kingside.core.move_generator import MoveGenerator
from kingside.core.position import Position
from kingside.engine.evaluation import PIECE_VALUES, evaluate
from kingside.engine.search import CancelCheck, IEngine, SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)

_INF_SCORE = float("inf")
MATE_SCORE = 100_000.0
_TT_EXACT = 0
_TT_LOWER = 1
_TT_UPPER = 2
_QUIESCENCE_MAX_PLY = 6

_TT_MOVE_BONUS = 2500.0
_EN_PASSANT_BONUS = 8.0
_CASTLE_BONUS = 2.0
_KING_CASTLE_BONUS = 4.0
_PROMOTION_BONUS = 9.0
_CENTER_BONUS = 0.6


def _never_cancelled() -> bool:
    return False


@dataclass(slots=True)
class _TTEntry:
    depth: int
    score: float
    bound: int
    best_move: Move | None


class PythonSearchEngine(IEngine):
    """Iterative-deepening alpha-beta searcher with quiescence.

    Scores are computed from the point of view of the side to move at the
    root: that side maximizes, the other minimizes. One transposition table,
    keyed by the position's Zobrist hash, is shared by every iteration of a
    single :meth:`search` call. Quiescence keeps its own table of best
    captures, used only to order moves.
    """

    __slots__ = (
        "_cancel_check",
        "_deadline",
        "_nodes",
        "_last_yield_nodes",
        "_stopped",
        "_tt",
        "_qtt",
        "_tt_max_entries",
    )

    def __init__(self, *, tt_max_entries: int = 200_000) -> None:
        self._nodes = 0
        self._last_yield_nodes = 0
        self._stopped = False
        self._deadline: float | None = None
        self._cancel_check: CancelCheck = _never_cancelled
        self._tt: dict[int, _TTEntry] = {}
        self._qtt: dict[int, Move] = {}
        self._tt_max_entries = tt_max_entries

    def search(
        self,
        position: Position,
        limits: SearchLimits,
        is_cancelled: CancelCheck | None = None,
    ) -> SearchResult:
        if limits.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        self._nodes = 0
        self._last_yield_nodes = 0
        self._stopped = False
        self._tt.clear()
        self._qtt.clear()
        self._cancel_check = is_cancelled or _never_cancelled
        self._deadline = None
        if limits.time_limit_ms is not None:
            ms = max(limits.time_limit_ms, 1)
            self._deadline = perf_counter() + (ms / 1000.0)

        perspective = position.side_to_move
        root_gen = MoveGenerator(position)
        root_moves = root_gen.generate_legal_moves()
        if not root_moves:
            if root_gen.is_in_check(perspective):
                return SearchResult(None, -MATE_SCORE, 0, self._nodes)
            return SearchResult(None, 0.0, 0, self._nodes)

        ordered_root = self._order_moves(position, root_moves)
        best_move = ordered_root[0]
        best_score = evaluate(position, perspective)
        completed_depth = 0

        for depth in range(1, limits.max_depth + 1):
            if self._should_stop():
                break

            score, move = self._search_root(position, ordered_root, depth, perspective)
            if move is None:
                break
            if self._stopped:
                # An interrupted first iteration still beats the blind guess.
                if completed_depth == 0:
                    best_move = move
                    best_score = score
                break

            best_move = move
            best_score = score
            completed_depth = depth
            _LOGGER.debug(
                "depth %d: best %s score %.2f nodes %d",
                depth,
                move,
                score,
                self._nodes,
            )

            # Previous best first in the next iteration.
            ordered_root = self._order_moves(position, root_moves, tt_move=move)

        return SearchResult(best_move, best_score, completed_depth, self._nodes)

    def _search_root(
        self,
        position: Position,
        root_moves: list[Move],
        depth: int,
        perspective: Color,
    ) -> tuple[float, Move | None]:
        best_score = -_INF_SCORE
        best_move: Move | None = None
        alpha = -_INF_SCORE

        for move in root_moves:
            if self._should_stop():
                break

            score = self._minimax(
                position.apply_move(move),
                depth - 1,
                alpha,
                _INF_SCORE,
                perspective,
            )
            if score > best_score:
                best_score = score
                best_move = move
            if score > alpha:
                alpha = score

        return best_score, best_move

    def _minimax(
        self,
        position: Position,
        depth: int,
        alpha: float,
        beta: float,
        perspective: Color,
    ) -> float:
        if self._should_stop():
            return evaluate(position, perspective)

        self._nodes += 1
        alpha_orig = alpha
        beta_orig = beta
        tt_key = position.zobrist_hash
        stored = self._tt.get(tt_key)
        tt_move = stored.best_move if stored is not None else None

        tt_entry = self._probe_tt(tt_key, depth)
        if tt_entry is not None:
            if tt_entry.bound == _TT_EXACT:
                return tt_entry.score
            if tt_entry.bound == _TT_LOWER:
                alpha = max(alpha, tt_entry.score)
            else:
                beta = min(beta, tt_entry.score)
            if alpha >= beta:
                return tt_entry.score

        gen = MoveGenerator(position)
        legal = gen.generate_legal_moves()
        maximizing = position.side_to_move == perspective

        if not legal:
            if gen.is_in_check(position.side_to_move):
                # Sooner mates keep more depth in hand and score higher.
                mate = MATE_SCORE + depth
                score = -mate if maximizing else mate
            else:
                score = 0.0
            self._store_tt(tt_key, depth, score, _TT_EXACT, best_move=None)
            return score

        if depth <= 0:
            score = self._quiescence(position, alpha, beta, perspective, ply=0)
            self._store_tt(
                tt_key,
                0,
                score,
                self._bound(score, alpha_orig, beta_orig),
                best_move=None,
            )
            return score

        ordered = self._order_moves(position, legal, tt_move=tt_move)
        best_score = -_INF_SCORE if maximizing else _INF_SCORE
        best_move: Move | None = None

        for move in ordered:
            score = self._minimax(
                position.apply_move(move), depth - 1, alpha, beta, perspective
            )
            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, best_score)
            if beta <= alpha or self._should_stop():
                break

        self._store_tt(
            tt_key,
            depth,
            best_score,
            self._bound(best_score, alpha_orig, beta_orig),
            best_move=best_move,
        )
        return best_score

    def _quiescence(
        self,
        position: Position,
        alpha: float,
        beta: float,
        perspective: Color,
        ply: int,
    ) -> float:
        if self._should_stop():
            return evaluate(position, perspective)

        self._nodes += 1
        maximizing = position.side_to_move == perspective
        stand_pat = evaluate(position, perspective)

        if maximizing:
            if stand_pat >= beta:
                return stand_pat
            alpha = max(alpha, stand_pat)
        else:
            if stand_pat <= alpha:
                return stand_pat
            beta = min(beta, stand_pat)

        # Hard cap on capture sequences.
        if ply >= _QUIESCENCE_MAX_PLY:
            return stand_pat

        noisy = [
            move
            for move in MoveGenerator(position).generate_legal_moves()
            if move.is_noisy
        ]
        if not noisy:
            return stand_pat

        key = position.zobrist_hash
        best_score = stand_pat
        best_move: Move | None = None
        for move in self._order_moves(position, noisy, tt_move=self._qtt.get(key)):
            if self._should_stop():
                break
            score = self._quiescence(
                position.apply_move(move), alpha, beta, perspective, ply + 1
            )
            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, best_score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, best_score)
            if beta <= alpha:
                break

        if best_move is not None and not self._stopped:
            self._qtt[key] = best_move
        return best_score

    @staticmethod
    def _bound(score: float, alpha_orig: float, beta_orig: float) -> int:
        if score <= alpha_orig:
            return _TT_UPPER
        if score >= beta_orig:
            return _TT_LOWER
        return _TT_EXACT

    def _should_stop(self) -> bool:
        if self._stopped:
            return True
        if self._nodes - self._last_yield_nodes >= 4096:
            self._last_yield_nodes = self._nodes
            sleep(0.001)
        if self._cancel_check() or (
            self._deadline is not None and perf_counter() >= self._deadline
        ):
            self._stopped = True
        return self._stopped

    def _order_moves(
        self,
        position: Position,
        moves: list[Move],
        tt_move: Move | None = None,
    ) -> list[Move]:
        return sorted(
            moves,
            key=lambda move: self._move_order_score(position, move, tt_move),
            reverse=True,
        )

    def _move_order_score(
        self,
        position: Position,
        move: Move,
        tt_move: Move | None = None,
    ) -> float:
        board = position.board
        moving_piece = board[move.from_sq]
        if moving_piece is None:
            return -_INF_SCORE

        score = 0.0
        if tt_move is not None and move == tt_move:
            score += _TT_MOVE_BONUS

        target_piece = board[move.to_sq]
        if target_piece is not None:
            score += PIECE_VALUES[target_piece.piece_type] * 10
            score -= PIECE_VALUES[moving_piece.piece_type] * 0.5
        if move.flag == MoveFlag.EN_PASSANT:
            score += _EN_PASSANT_BONUS
        if move.is_castle:
            score += _CASTLE_BONUS
            if moving_piece.piece_type == PieceType.KING:
                score += _KING_CASTLE_BONUS
        if moving_piece.piece_type == PieceType.PAWN and move.to_sq[0] in (0, 7):
            score += _PROMOTION_BONUS

        row, col = move.to_sq
        if 2 <= row <= 5 and 2 <= col <= 5:
            score += _CENTER_BONUS
        return score

    def _probe_tt(self, key: int, depth: int) -> _TTEntry | None:
        """Entry for *key*, but only if it was searched at least *depth* deep."""
        entry = self._tt.get(key)
        if entry is None or entry.depth < depth:
            return None
        return entry

    def _store_tt(
        self,
        key: int,
        depth: int,
        score: float,
        bound: int,
        best_move: Move | None,
    ) -> None:
        if self._stopped:
            return
        existing = self._tt.get(key)
        if existing is not None and existing.depth > depth:
            return
        if len(self._tt) >= self._tt_max_entries and key not in self._tt:
            self._tt.clear()
        self._tt[key] = _TTEntry(
            depth=depth, score=score, bound=bound, best_move=best_move
        )
