import sys

from docquery.cli import main

sys.exit(main())
