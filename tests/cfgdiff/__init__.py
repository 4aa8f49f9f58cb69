# Copyright Red Hat
#
# tests/cfgdiff/__init__.py - Configuration diff test package
#
# This file is part of the cfgm project.
#
# SPDX-License-Identifier: Apache-2.0
