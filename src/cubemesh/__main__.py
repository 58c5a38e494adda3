import sys

from cubemesh.cli import main

sys.exit(main())
