from text_al_pipeline.cli import main

raise SystemExit(main())
