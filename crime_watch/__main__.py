import sys

from crime_watch.cli import main

sys.exit(main())
