"""Monthly station climate summaries: tidy tables, missing values and grouping.

The package is organised as small, explicit helpers around pandas:

- :mod:`stationclim.table` and :mod:`stationclim.missing` for table creation,
  subsetting, type conversion and sentinel handling.
- :mod:`stationclim.grouping` for grouped reductions such as "which stations
  have missing precipitation".
- :mod:`stationclim.processing` for the raw CSV -> tidy CSV pipeline.

Importing the package has no side effects.
"""
