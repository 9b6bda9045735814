"""
Created on 2026-03-02

@author: wf
"""

from dataclasses import dataclass

import djvumeta


@dataclass
class Version:
    """
    Version handling for djvu-meta
    """

    name = "djvu-meta"
    version = djvumeta.__version__
    date = "2026-03-02"
    updated = "2026-03-09"
    description = "DjVu metadata extraction with page dimensions, page text and caching"

    authors = "Wolfgang Fahl"

    doc_url = "https://wiki.bitplan.com/index.php/djvu-meta"
    chat_url = "https://github.com/WolfgangFahl/djvu-meta/discussions"
    cm_url = "https://github.com/WolfgangFahl/djvu-meta"

    license = """Copyright 2026 contributors. All rights reserved.

  Licensed under the Apache License 2.0
  http://www.apache.org/licenses/LICENSE-2.0

  Distributed on an "AS IS" basis without warranties
  or conditions of any kind, either express or implied."""

    longDescription = f"""{name} version {version}
{description}

  Created by {authors} on {date} last updated {updated}"""
