# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Config file loading for squirrelpack.

A config file supplies the option bag layered between package.json
defaults and explicit options.

Public API:

- load_config_file: Load a YAML/JSON option bag

Example:
    Basic usage:

        from pathlib import Path
        from squirrelpack.config import load_config_file

        bag = load_config_file(Path("installer.yaml"))
        print(bag.get("productName"))

"""

from .loader import load_config_file

__all__ = ["load_config_file"]
