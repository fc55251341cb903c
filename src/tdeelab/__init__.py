"""tdeelab - adaptive energy-expenditure estimation from food and weight logs."""

__version__ = "0.1.0"
