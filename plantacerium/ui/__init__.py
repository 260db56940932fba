"""Terminal front end: key decoding, key routing, rich rendering and the app loop."""
