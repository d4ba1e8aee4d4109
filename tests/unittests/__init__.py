# This file is part of setip. See LICENSE file for license information.
