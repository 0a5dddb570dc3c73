from taskboard.main import main

raise SystemExit(main())
