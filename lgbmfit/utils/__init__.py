"""
Utility package setup.

Enables pandas Copy-on-Write globally so score-history frames and CSV inputs
are not duplicated when columns are sliced into feature matrices.
"""

import pandas as pd

pd.options.mode.copy_on_write = True
