"""Immutable 8x8 draughts board with move generation.

Row 0 is Black's back rank and row 7 is White's, so white men move up the
board (towards row 0) and black men move down. Boards are frozen; every move
produces a new board.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Tuple

SIZE = 8


class Color(Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def man(self) -> "Piece":
        return Piece.WHITE_MAN if self is Color.WHITE else Piece.BLACK_MAN

    @property
    def king(self) -> "Piece":
        return Piece.WHITE_KING if self is Color.WHITE else Piece.BLACK_KING

    @property
    def forward(self) -> int:
        """Row delta of a man's move."""
        return -1 if self is Color.WHITE else 1

    @property
    def promotion_row(self) -> int:
        return 0 if self is Color.WHITE else SIZE - 1


class Piece(IntEnum):
    EMPTY = 0
    WHITE_MAN = 1
    WHITE_KING = 2
    BLACK_MAN = 3
    BLACK_KING = 4

    @property
    def color(self) -> Optional[Color]:
        if self in (Piece.WHITE_MAN, Piece.WHITE_KING):
            return Color.WHITE
        if self in (Piece.BLACK_MAN, Piece.BLACK_KING):
            return Color.BLACK
        return None

    @property
    def is_king(self) -> bool:
        return self in (Piece.WHITE_KING, Piece.BLACK_KING)

    @property
    def is_man(self) -> bool:
        return self in (Piece.WHITE_MAN, Piece.BLACK_MAN)

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    Piece.EMPTY: ".",
    Piece.WHITE_MAN: "w",
    Piece.WHITE_KING: "W",
    Piece.BLACK_MAN: "b",
    Piece.BLACK_KING: "B",
}

UP_LEFT, UP_RIGHT, DOWN_LEFT, DOWN_RIGHT = (-1, -1), (-1, 1), (1, -1), (1, 1)


def directions_for(piece: Piece) -> Tuple[Tuple[int, int], ...]:
    """Diagonal directions a piece may travel, always in up-then-down order."""
    if piece is Piece.WHITE_MAN:
        return (UP_LEFT, UP_RIGHT)
    if piece is Piece.BLACK_MAN:
        return (DOWN_LEFT, DOWN_RIGHT)
    if piece.is_king:
        return (UP_LEFT, UP_RIGHT, DOWN_LEFT, DOWN_RIGHT)
    return ()


class Square(NamedTuple):
    row: int
    col: int


@dataclass(frozen=True)
class Move:
    start: Square
    dest: Square

    @property
    def is_capture(self) -> bool:
        return abs(self.start.row - self.dest.row) == 2

    @property
    def captured(self) -> Optional[Square]:
        if not self.is_capture:
            return None
        return Square((self.start.row + self.dest.row) // 2, (self.start.col + self.dest.col) // 2)

    def __str__(self) -> str:
        sep = "x" if self.is_capture else "-"
        return f"({self.start.row},{self.start.col}){sep}({self.dest.row},{self.dest.col})"


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < SIZE and 0 <= col < SIZE


@dataclass(frozen=True)
class Board:
    """The 8x8 grid of pieces, indexed ``cells[row][col]``."""
    cells: Tuple[Tuple[Piece, ...], ...]

    def __post_init__(self):
        if len(self.cells) != SIZE or any(len(row) != SIZE for row in self.cells):
            raise ValueError(f"Board must be {SIZE}x{SIZE}")
        object.__setattr__(self, "cells", tuple(tuple(Piece(v) for v in row) for row in self.cells))

    @classmethod
    def empty(cls) -> "Board":
        return cls(tuple((Piece.EMPTY,) * SIZE for _ in range(SIZE)))

    @classmethod
    def initial(cls) -> "Board":
        """Standard opening: three rows of men per side on the dark squares."""
        rows = []
        for row in range(SIZE):
            cells = []
            for col in range(SIZE):
                dark = (row + col) % 2 == 1
                if dark and row < 3:
                    cells.append(Piece.BLACK_MAN)
                elif dark and row >= SIZE - 3:
                    cells.append(Piece.WHITE_MAN)
                else:
                    cells.append(Piece.EMPTY)
            rows.append(tuple(cells))
        return cls(tuple(rows))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        """Build from nested integer piece codes (``Piece`` values)."""
        try:
            cells = tuple(tuple(Piece(int(v)) for v in row) for row in rows)
        except ValueError as exc:
            raise ValueError(f"Invalid piece code: {exc}") from exc
        return cls(cells)

    @classmethod
    def from_pieces(cls, pieces: Mapping[Tuple[int, int], Piece]) -> "Board":
        grid = [[Piece.EMPTY] * SIZE for _ in range(SIZE)]
        for (row, col), piece in pieces.items():
            if not in_bounds(row, col):
                raise ValueError(f"Square off the board: {(row, col)}")
            grid[row][col] = Piece(piece)
        return cls(tuple(tuple(r) for r in grid))

    def at(self, row: int, col: int) -> Piece:
        return self.cells[row][col]

    def squares(self) -> Iterator[Tuple[Square, Piece]]:
        """Row-major scan of every cell."""
        for row in range(SIZE):
            for col in range(SIZE):
                yield Square(row, col), self.cells[row][col]

    def pieces(self, color: Color) -> List[Square]:
        return [sq for sq, piece in self.squares() if piece.color is color]

    def count(self, color: Color) -> int:
        return len(self.pieces(color))

    def replace(self, changes: Iterable[Tuple[Square, Piece]]) -> "Board":
        grid = [list(row) for row in self.cells]
        for (row, col), piece in changes:
            grid[row][col] = piece
        return Board(tuple(tuple(r) for r in grid))

    def to_rows(self) -> List[List[int]]:
        return [[int(p) for p in row] for row in self.cells]

    def __str__(self) -> str:
        return "\n".join(" ".join(p.symbol for p in row) for row in self.cells)


def make_move(board: Board, start: Square, dest: Square) -> Board:
    """Return a new board with the piece moved; legality is not checked.

    A man reaching the far back rank is crowned, and a two-row jump removes
    the piece it passed over.
    """
    piece = board.at(*start)
    landed = piece
    if piece is Piece.WHITE_MAN and dest[0] == Color.WHITE.promotion_row:
        landed = Piece.WHITE_KING
    elif piece is Piece.BLACK_MAN and dest[0] == Color.BLACK.promotion_row:
        landed = Piece.BLACK_KING

    changes = [(Square(*start), Piece.EMPTY), (Square(*dest), landed)]
    if abs(start[0] - dest[0]) == 2:
        changes.append((Square((start[0] + dest[0]) // 2, (start[1] + dest[1]) // 2), Piece.EMPTY))
    return board.replace(changes)


def apply_move(board: Board, move: Move) -> Board:
    return make_move(board, move.start, move.dest)


def get_valid_captures(board: Board, square: Square, player: Color) -> List[Square]:
    """Landing squares of the jumps available to the piece on ``square``."""
    row, col = square
    captures = []
    for dr, dc in directions_for(board.at(row, col)):
        over_r, over_c = row + dr, col + dc
        land_r, land_c = row + 2 * dr, col + 2 * dc
        if not (in_bounds(over_r, over_c) and in_bounds(land_r, land_c)):
            continue
        if board.at(over_r, over_c).color is player.opponent and board.at(land_r, land_c) is Piece.EMPTY:
            captures.append(Square(land_r, land_c))
    return captures


def get_valid_regular_moves(board: Board, square: Square, player: Color) -> List[Square]:
    row, col = square
    moves = []
    for dr, dc in directions_for(board.at(row, col)):
        r, c = row + dr, col + dc
        if in_bounds(r, c) and board.at(r, c) is Piece.EMPTY:
            moves.append(Square(r, c))
    return moves


def get_piece_moves(board: Board, square: Square, player: Color) -> List[Square]:
    """Destinations for a single piece; its own captures take priority."""
    captures = get_valid_captures(board, square, player)
    if captures:
        return captures
    return get_valid_regular_moves(board, square, player)


def get_all_valid_moves(board: Board, player: Color) -> List[Move]:
    """Every legal move for ``player`` in board-scan order.

    Captures are mandatory: if any piece can jump, only jumps are returned.
    """
    owned = board.pieces(player)
    captures = [Move(sq, dest) for sq in owned for dest in get_valid_captures(board, sq, player)]
    if captures:
        return captures
    return [Move(sq, dest) for sq in owned for dest in get_valid_regular_moves(board, sq, player)]


def winner(board: Board, to_move: Color) -> Optional[Color]:
    """The side that has won, judged with ``to_move`` to play; None if undecided."""
    if board.count(to_move) == 0 or not get_all_valid_moves(board, to_move):
        return to_move.opponent
    if board.count(to_move.opponent) == 0:
        return to_move
    return None
