# config package — authoritative source for all toolkit defaults.
#
# Sub-modules:
#   stat_params.py  — confidence levels, batch-means parameters, bootstrap
#                     sizes, random-stream seeds, default quantile grid
