# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from bubbles import config


@pytest.fixture(autouse=True)
def _fresh_configuration():
    config.reset_configuration()
    yield
    config.reset_configuration()
