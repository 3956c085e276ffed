from lrustore.cli import main

raise SystemExit(main())
