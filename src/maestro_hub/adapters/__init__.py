"""Provider adapters (banks and crypto price sources)."""
