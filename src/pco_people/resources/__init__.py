# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Representative resource callers built on the request pipeline."""

from .base import BaseResource
from .households import HouseholdsResource
from .people import PeopleResource

__all__ = ["BaseResource", "HouseholdsResource", "PeopleResource"]
