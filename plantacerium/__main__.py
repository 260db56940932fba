import sys

from plantacerium.ui.app import main

sys.exit(main())
