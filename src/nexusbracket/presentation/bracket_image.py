"""Bracket image rendering.

This module draws the bracket as a PNG: one column per round, one card per
match, and a final results panel once the tournament is completed.
"""

# Nexus Bracket
# Copyright (C) 2025  Nexus Bracket developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import os
from typing import List, Optional, Sequence

# Rendering never needs a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QBuffer, QByteArray, QIODevice, QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QGuiApplication, QImage, QPainter, QPen

from nexusbracket.bracket import compute_podium, matches_by_round
from nexusbracket.constants import (
    BYE_LABEL,
    EMPTY_PLACE,
    IMAGE_BACKGROUND,
    IMAGE_BRONZE,
    IMAGE_CARD,
    IMAGE_CARD_BORDER,
    IMAGE_CARD_BORDER_DONE,
    IMAGE_GOLD,
    IMAGE_MUTED_TEXT,
    IMAGE_ROUND_HEADER,
    IMAGE_SILVER,
    IMAGE_SUBTITLE,
    IMAGE_TEXT,
    IMAGE_TITLE,
    IMAGE_WINNER_TEXT,
)
from nexusbracket.exceptions import RenderException
from nexusbracket.identity import LabelResolver
from nexusbracket.models import Match, Podium, Tournament
from nexusbracket.utils import setup_logger

logger = setup_logger(__name__)

# Layout
COLUMN_WIDTH = 260
ROW_HEIGHT = 120
MARGIN_X = 60
MARGIN_TOP = 110
MARGIN_Y = 60
CARD_PADDING = 12
WINNERS_PANEL_HEIGHT = 150
PLACEHOLDER_SIZE = (900, 500)

_application: Optional[QGuiApplication] = None


def _ensure_gui_application() -> QGuiApplication:
    """QPainter needs a QGuiApplication for fonts."""
    global _application
    app = QGuiApplication.instance()
    if app is None:
        _application = QGuiApplication([])
        app = _application
    return app


def _font(size: int, bold: bool = False) -> QFont:
    font = QFont("Sans Serif")
    font.setPixelSize(size)
    font.setBold(bold)
    return font


class BracketImageRenderer:
    """
    Draws a tournament bracket to PNG bytes.

    Parameters
    ----------
    resolver : LabelResolver
        Turns entrant ids into names.
    """

    def __init__(self, resolver: LabelResolver):
        self.resolver = resolver

    def render(self, tournament: Tournament, matches: Sequence[Match]) -> bytes:
        """
        Render the bracket.

        Parameters
        ----------
        tournament : Tournament
            Tournament to draw
        matches : sequence of Match
            All matches of the tournament

        Returns
        -------
        bytes
            PNG image data

        Raises
        ------
        RenderException
            If the image could not be encoded
        """
        _ensure_gui_application()
        own = [m for m in matches if m.tournament_id == tournament.id]
        if not own:
            image = self._render_placeholder()
        else:
            image = self._render_bracket(tournament, own)
        return self._to_png(image)

    # ========== Drawing ==========

    def _new_image(self, width: int, height: int) -> QImage:
        image = QImage(width, height, QImage.Format.Format_ARGB32)
        image.fill(QColor(IMAGE_BACKGROUND))
        return image

    def _render_placeholder(self) -> QImage:
        image = self._new_image(*PLACEHOLDER_SIZE)
        painter = QPainter(image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.setPen(QColor(IMAGE_TEXT))
            painter.setFont(_font(30))
            painter.drawText(QPointF(60, 260), "No matches created yet.")
        finally:
            painter.end()
        return image

    def _render_bracket(self, tournament: Tournament, matches: List[Match]) -> QImage:
        rounds = matches_by_round(matches)
        tallest = max(len(group) for group in rounds.values())

        show_winners = tournament.is_completed
        width = MARGIN_X * 2 + COLUMN_WIDTH * len(rounds)
        height = MARGIN_Y * 2 + MARGIN_TOP + ROW_HEIGHT * tallest
        if show_winners:
            height += WINNERS_PANEL_HEIGHT

        image = self._new_image(width, height)
        painter = QPainter(image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            self._draw_title(painter, tournament)

            round_numbers = list(rounds)
            for column, number in enumerate(round_numbers):
                is_last_column = column == len(round_numbers) - 1
                self._draw_round(painter, column, number, rounds[number], is_last_column)

            if show_winners:
                self._draw_winners_panel(
                    painter, compute_podium(tournament, matches), width, height
                )
        finally:
            painter.end()
        return image

    def _draw_title(self, painter: QPainter, tournament: Tournament) -> None:
        painter.setPen(QColor(IMAGE_TITLE))
        painter.setFont(_font(30, bold=True))
        painter.drawText(QPointF(MARGIN_X, 50), tournament.name)

        painter.setPen(QColor(IMAGE_SUBTITLE))
        painter.setFont(_font(17))
        painter.drawText(
            QPointF(MARGIN_X, 80),
            f"{tournament.short_code} • Best of {tournament.best_of} • "
            f"Current round: {tournament.current_round}",
        )

    def _draw_round(
        self,
        painter: QPainter,
        column: int,
        round_number: int,
        matches: List[Match],
        is_last_column: bool,
    ) -> None:
        column_x = MARGIN_X + column * COLUMN_WIDTH
        painter.setPen(QColor(IMAGE_ROUND_HEADER))
        painter.setFont(_font(20, bold=True))
        painter.drawText(QPointF(column_x, MARGIN_TOP - 25), f"Round {round_number}")

        card_width = COLUMN_WIDTH - 40
        card_height = ROW_HEIGHT - 40
        for row, match in enumerate(matches):
            card = QRectF(
                column_x, MARGIN_TOP + MARGIN_Y + row * ROW_HEIGHT, card_width, card_height
            )
            self._draw_match_card(painter, card, match)

            if not is_last_column:
                # connector towards the next column
                painter.setPen(QPen(QColor(IMAGE_MUTED_TEXT), 1.5))
                middle_y = card.center().y()
                painter.drawLine(
                    QPointF(card.right(), middle_y),
                    QPointF(column_x + COLUMN_WIDTH - 25, middle_y),
                )

    def _draw_match_card(self, painter: QPainter, card: QRectF, match: Match) -> None:
        border = IMAGE_CARD_BORDER_DONE if match.is_completed else IMAGE_CARD_BORDER
        painter.setPen(QPen(QColor(border), 3 if match.is_completed else 2))
        painter.setBrush(QColor(IMAGE_CARD))
        painter.drawRoundedRect(card, 12, 12)
        painter.setBrush(Qt.BrushStyle.NoBrush)

        x = card.left() + CARD_PADDING
        y = card.top() + CARD_PADDING + 6

        painter.setPen(QColor(IMAGE_SUBTITLE))
        painter.setFont(_font(12))
        painter.drawText(QPointF(x, y), match.id)

        first = self.resolver.label(match.entrant1)
        second = BYE_LABEL if match.is_bye else self.resolver.label(match.entrant2)
        painter.setFont(_font(14))
        for offset, (entrant, label) in enumerate(
            [(match.entrant1, first), (match.entrant2, second)], start=1
        ):
            won = match.winner is not None and entrant == match.winner
            if entrant is None:
                color = IMAGE_MUTED_TEXT
            else:
                color = IMAGE_WINNER_TEXT if won else IMAGE_TEXT
            painter.setPen(QColor(color))
            painter.drawText(QPointF(x, y + 20 * offset), label)

    def _draw_winners_panel(
        self, painter: QPainter, podium: Podium, width: int, height: int
    ) -> None:
        if not podium.determined:
            return

        panel = QRectF(
            MARGIN_X,
            height - WINNERS_PANEL_HEIGHT + 20,
            width - MARGIN_X * 2,
            WINNERS_PANEL_HEIGHT - 40,
        )
        painter.setPen(QPen(QColor(IMAGE_CARD_BORDER), 2))
        painter.setBrush(QColor(IMAGE_CARD))
        painter.drawRoundedRect(panel, 16, 16)
        painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.setPen(QColor(IMAGE_TEXT))
        painter.setFont(_font(18, bold=True))
        painter.drawText(QPointF(panel.left() + 20, panel.top() + 28), "Final Results")

        gap = 30
        column_width = (panel.width() - 40 - gap * 2) / 3
        third = self.resolver.labels(podium.third_place) or [EMPTY_PLACE]
        runner_up = [self.resolver.label(podium.runner_up)] if podium.runner_up else [EMPTY_PLACE]
        columns = [
            ("1st Place", IMAGE_GOLD, [self.resolver.label(podium.champion)]),
            ("2nd Place", IMAGE_SILVER, runner_up),
            ("3rd Place", IMAGE_BRONZE, third),
        ]
        for index, (title, color, names) in enumerate(columns):
            x = panel.left() + 20 + index * (column_width + gap)
            y = panel.top() + 40
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QColor(color))
            painter.drawRoundedRect(QRectF(x, y, column_width, 8), 4, 4)
            painter.setBrush(Qt.BrushStyle.NoBrush)

            painter.setPen(QColor(IMAGE_TEXT))
            painter.setFont(_font(15, bold=True))
            painter.drawText(QPointF(x, y + 28), title)
            painter.setFont(_font(14))
            for line, name in enumerate(names):
                painter.drawText(QPointF(x, y + 48 + 18 * line), name)

    # ========== Encoding ==========

    @staticmethod
    def _to_png(image: QImage) -> bytes:
        data = QByteArray()
        buffer = QBuffer(data)
        if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
            raise RenderException("Could not open image buffer")
        try:
            if not image.save(buffer, "PNG"):
                raise RenderException("Could not encode bracket image as PNG")
        finally:
            buffer.close()
        logger.debug(f"Rendered bracket image ({data.size()} bytes)")
        return bytes(data.data())


def render_bracket_image(
    resolver: LabelResolver, tournament: Tournament, matches: Sequence[Match]
) -> bytes:
    """Convenience wrapper around ``BracketImageRenderer.render``."""
    return BracketImageRenderer(resolver).render(tournament, matches)
