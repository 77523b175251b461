import sys

from gcal_agenda.cli import main

sys.exit(main())
