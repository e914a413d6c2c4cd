"""Exceptions and advisory labels raised by the projection pipeline."""


class InsufficientDataError(ValueError):
    """Training window has too few usable week-to-week transitions."""


# Advisory label attached to outputs when S goes negative.
POPULATION_ASSUMPTION_VIOLATED = "PopulationAssumptionViolated"
