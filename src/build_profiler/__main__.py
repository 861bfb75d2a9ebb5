from build_profiler.cli import main

raise SystemExit(main())
