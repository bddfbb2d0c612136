ERR_BUSY = "BUSY"
ERR_TIMEOUT = "TIMEOUT"

# acquisition
ERR_NATIVE_UNAVAILABLE = "NATIVE_UNAVAILABLE"   # caller should fall back to the web backend
ERR_PERMISSION_DENIED = "PERMISSION_DENIED"
ERR_NO_IMAGE = "NO_IMAGE"
ERR_BAD_IMAGE = "BAD_IMAGE"

# analysis collaborator
ERR_ANALYSIS_FAILED = "ANALYSIS_FAILED"
