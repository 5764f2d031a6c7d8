"""Exceptions for use in Nexus Bracket"""

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


# ========== Base Application Exception ==========


class NexusBracketException(Exception):
    """Base exception for all Nexus Bracket errors.

    All custom exceptions in the application should inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ========== Precondition Exceptions ==========


class PreconditionException(NexusBracketException):
    """Base exception for rejected commands.

    The message is short and meant to be shown to the person who issued
    the command. Raising one of these never leaves partial state behind.
    """

    pass


class TournamentStateException(PreconditionException):
    """Raised when tournament is in an invalid state for the requested operation."""

    pass


class TournamentNotFoundException(PreconditionException):
    """Raised when a guild has no tournament or an id is unknown."""

    pass


class DuplicateEntrantException(PreconditionException):
    """Raised when attempting to add an entrant that is already registered."""

    pass


class NotEnoughEntrantsException(PreconditionException):
    """Raised when starting a tournament with fewer than two entrants."""

    pass


class MatchNotFoundException(PreconditionException):
    """Raised when a requested match cannot be found."""

    pass


class InvalidResultException(PreconditionException):
    """Raised when the reported winner is not one of the match entrants."""

    pass


class DuplicateResultException(PreconditionException):
    """Raised when reporting a result for a match that is already completed."""

    pass


# ========== Validation Exceptions ==========


class ValidationException(PreconditionException):
    """Base exception for validation errors."""

    pass


class BestOfValidationException(ValidationException):
    """Raised when a best-of value is not a positive odd number."""

    pass


class BracketUrlValidationException(ValidationException):
    """Raised when a bracket link is not an http(s) URL."""

    pass


class NameValidationException(ValidationException):
    """Raised when a tournament or entrant name is empty."""

    pass


# ========== Bracket Exceptions ==========


class BracketException(NexusBracketException):
    """Base exception for bracket engine errors."""

    pass


class EmptyRoundException(BracketException):
    """Raised when a round is requested for an empty entrant list."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(NexusBracketException):
    """Base exception for resource-related errors."""

    pass


class ResourceUnavailableException(ResourceException):
    """Raised when a round cannot be hosted (e.g. the match category is gone)."""

    pass


class FileLoadException(ResourceException):
    """Raised when a file cannot be loaded."""

    pass


class FileSaveException(ResourceException):
    """Raised when a file cannot be saved."""

    pass


class RenderException(ResourceException):
    """Raised when the bracket image cannot be produced."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(NexusBracketException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass
