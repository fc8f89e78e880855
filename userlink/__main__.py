from userlink.cli import main

raise SystemExit(main())
