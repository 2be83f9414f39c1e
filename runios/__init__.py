"""run-ios: build an Xcode project and launch it on an iOS simulator."""
